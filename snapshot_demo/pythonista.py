# coding: utf-8
# Service adapters over the Pythonista 3 runtime (iOS). Import only on-device.

import io
import logging
import math
import os
import tempfile
import threading
import time
from urllib.parse import quote

import clipboard
import console
import dialogs
import location
import ui
import webbrowser
from PIL import Image

from snapshot_demo.model import Coordinate, MapType, PermissionState, SendOutcome

logger = logging.getLogger(__name__)

METERS_PER_DEGREE = 111320.0
PERMISSION_TIMEOUT = 30.0
PERMISSION_POLL = 0.5
LOCATION_POLL = 1.0
MARKER_SIZE = 16
ACCENT_BLUE = '#0a84ff'


def on_main(fn, *args):
    """Hand a callback back to the UI thread."""
    ui.delay(lambda: fn(*args), 0.0)


def _coordinate(loc):
    if loc and 'latitude' in loc and 'longitude' in loc:
        return Coordinate(float(loc['latitude']), float(loc['longitude']))
    return None


def sms_url(recipients, body=None):
    """Messages URL; the /open?addresses= form is the one iOS honours for several recipients."""
    url = 'sms:/open?addresses=' + ','.join(quote(r, safe='+') for r in recipients)
    if body:
        url += '&body=' + quote(body, safe='')
    return url


@ui.in_background
def alert(title, message):
    dialogs.alert(title, message, 'OK', hide_cancel_button=True)


# ---------- Location ----------
class PythonistaLocationService:
    """Pythonista only reports authorized/not; a timed-out request counts as denied."""

    def __init__(self, timeout=PERMISSION_TIMEOUT, poll=PERMISSION_POLL):
        self.timeout = timeout
        self.poll = poll
        self._handler = None

    def set_permission_handler(self, fn):
        self._handler = fn

    def current_permission_status(self):
        if location.is_authorized():
            return PermissionState.AUTHORIZED
        return PermissionState.NOT_DETERMINED

    def request_permission(self):
        threading.Thread(target=self._await_permission, daemon=True).start()

    def _await_permission(self):
        # start_updates() is what brings up the system prompt
        location.start_updates()
        t0 = time.time()
        state = PermissionState.DENIED
        try:
            while time.time() - t0 < self.timeout:
                if location.is_authorized():
                    state = PermissionState.AUTHORIZED
                    break
                time.sleep(self.poll)
        finally:
            location.stop_updates()
        if self._handler:
            on_main(self._handler, state)


# ---------- Map ----------
class PythonistaMapView(ui.View):
    """Map surface built from Apple Maps snapshots plus a live position marker."""

    def __init__(self, poll=LOCATION_POLL, **kwargs):
        super().__init__(**kwargs)
        self.poll = poll
        self.region = None
        self.map_type = MapType.STANDARD
        self.show_user_location = False
        self.user_coordinate = None
        self._last_reported = None
        self._handler = None
        self._render_gen = 0
        self._last_snap_key = None
        self._last_snap_img = None
        self._updating = False

        self.imgv = ui.ImageView(content_mode=ui.CONTENT_SCALE_ASPECT_FILL)
        self.imgv.flex = 'WH'
        self.imgv.bg_color = (0.95, 0.95, 0.95)
        self.marker = ui.View(bg_color=ACCENT_BLUE, corner_radius=MARKER_SIZE / 2.0)
        self.marker.border_width = 2
        self.marker.border_color = 'white'
        self.marker.frame = (0, 0, MARKER_SIZE, MARKER_SIZE)
        self.marker.hidden = True
        self.add_subview(self.imgv)
        self.add_subview(self.marker)

    def layout(self):
        self.imgv.frame = self.bounds
        self._place_marker()
        if self.region:
            self._render(animated=False)

    def will_close(self):
        self.set_show_user_location(False)

    # ----- contract -----
    def set_update_handler(self, fn):
        self._handler = fn

    def set_map_type(self, map_type):
        if map_type != self.map_type:
            self.map_type = map_type
            if self.region:
                self._render(animated=False)

    def set_region(self, region, animated=False):
        self.region = region
        self._render(animated)
        self._place_marker()

    def set_show_user_location(self, flag):
        self.show_user_location = bool(flag)
        if self.show_user_location and not self._updating:
            self._updating = True
            threading.Thread(target=self._follow_location, daemon=True).start()
        elif not self.show_user_location:
            self._updating = False
            self._last_reported = None
        self._place_marker()

    def render_current_view_to_image(self):
        w, h = self.width, self.height
        if w < 1 or h < 1:
            return None
        # scale=0 renders at the device's pixel density
        with ui.ImageContext(w, h, 0) as ctx:
            self.draw_snapshot()
            img = ctx.get_image()
        return Image.open(io.BytesIO(img.to_png()))

    # ----- internals -----
    def _follow_location(self):
        location.start_updates()
        try:
            while self._updating:
                coord = _coordinate(location.get_location())
                on_main(self._location_changed, coord)
                time.sleep(self.poll)
        finally:
            location.stop_updates()

    def _location_changed(self, coord):
        # unchanged fixes, and misses before the first fix, are not reported
        if coord == self._last_reported:
            return
        self._last_reported = coord
        if coord is not None:
            self.user_coordinate = coord
            self._place_marker()
        if self._handler:
            self._handler(coord)

    def _place_marker(self):
        coord, region = self.user_coordinate, self.region
        if not (self.show_user_location and coord and region) or self.width < 1:
            self.marker.hidden = True
            return
        c, s = region.center, region.span
        x = (coord.longitude - (c.longitude - s.lon_delta / 2.0)) / s.lon_delta * self.width
        y = ((c.latitude + s.lat_delta / 2.0) - coord.latitude) / s.lat_delta * self.height
        self.marker.center = (x, y)
        self.marker.hidden = not (0 <= x <= self.width and 0 <= y <= self.height)

    def _render(self, animated):
        if self.width < 1 or self.height < 1:
            return
        self._render_gen += 1
        gen = self._render_gen
        region, map_type = self.region, self.map_type.value
        size = (int(self.width), int(self.height))
        threading.Thread(target=self._render_worker,
                         args=(gen, region, map_type, size, animated), daemon=True).start()

    def _render_worker(self, gen, region, map_type, size, animated):
        c, s = region.center, region.span
        width_m = s.lon_delta * METERS_PER_DEGREE * math.cos(math.radians(c.latitude))
        height_m = s.lat_delta * METERS_PER_DEGREE
        key = (round(c.latitude, 5), round(c.longitude, 5), int(width_m), int(height_m), map_type, size)
        if key == self._last_snap_key and self._last_snap_img is not None:
            snap = self._last_snap_img
        else:
            try:
                snap = location.render_map_snapshot(
                    c.latitude, c.longitude,
                    width=width_m, height=height_m,
                    map_type=map_type,
                    img_width=size[0], img_height=size[1])
            except Exception as e:
                logger.error(f'Map render failed: {e}')
                return
            self._last_snap_key, self._last_snap_img = key, snap
        on_main(self._show_snapshot, gen, snap, animated)

    def _show_snapshot(self, gen, snap, animated):
        if gen != self._render_gen or snap is self.imgv.image:
            return
        if not animated:
            self.imgv.image = snap
            return
        def fade_in():
            self.imgv.alpha = 1.0
        self.imgv.alpha = 0.6
        self.imgv.image = snap
        ui.animate(fade_in, 0.25)


# ---------- Messaging ----------
class PythonistaMessenger:
    """Plain texts go through the sms: URL scheme, attachments through the share sheet.

    iOS does not tell Pythonista whether a URL-launched text was sent, so that
    path always reports UNKNOWN.
    """

    def __init__(self, use_share_sheet=True):
        self.use_share_sheet = use_share_sheet
        self.last_tempfile = None

    def can_send_text(self):
        return bool(webbrowser.can_open('sms:'))

    def can_send_attachments(self):
        return self.use_share_sheet

    def compose_and_present(self, draft, completion):
        threading.Thread(target=self._compose, args=(draft, completion), daemon=True).start()

    def _compose(self, draft, completion):
        try:
            if draft.attachment is not None:
                outcome = self._share(draft)
            else:
                outcome = self._open_sms(draft)
        except Exception as e:
            logger.error(f'Compose failed: {e}')
            outcome = SendOutcome.FAILED
        on_main(completion, outcome)

    def _open_sms(self, draft):
        webbrowser.open(sms_url(draft.recipients, draft.body))
        return SendOutcome.UNKNOWN

    def _share(self, draft):
        path = self._encode_temp(draft.attachment)
        # the share sheet cannot prefill text; leave the body on the clipboard
        if draft.body:
            clipboard.set(draft.body)
        app = console.open_in(path)
        return SendOutcome.SENT if app else SendOutcome.CANCELLED

    def _encode_temp(self, attachment):
        if self.last_tempfile and os.path.exists(self.last_tempfile):
            try:
                os.remove(self.last_tempfile)
            except OSError:
                logger.warning(f'Could not remove {self.last_tempfile}')
        suffix = os.path.splitext(attachment.filename)[1] or '.png'
        tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
        with tmp:
            tmp.write(attachment.data)
        self.last_tempfile = tmp.name
        return tmp.name
