# coding: utf-8
"""Screen controller: permission gate, map setup, snapshot capture and sending.

The three platform services are handed in at construction time and talk
back through plain callbacks. All callbacks are expected on the UI thread;
permission requests and message composition return immediately and report
later, with no timeout.
"""

import logging

from snapshot_demo.cache import encode_png
from snapshot_demo.model import (
    Attachment, CacheIOError, CaptureInProgressError, DEFAULT_REGION, MapType,
    MessageDraft, PermissionState, SendOutcome,
)

logger = logging.getLogger(__name__)

MESSAGING_UNAVAILABLE = ('Cannot Send Message', 'This device is not able to send text messages.')
SEND_FAILED = ('Message Failed', 'The message with your map snapshot could not be sent.')


class ScreenController:
    def __init__(self, location_service, map_display, messenger, cache, alert,
                 default_region=DEFAULT_REGION):
        self.location_service = location_service
        self.map_display = map_display
        self.messenger = messenger
        self.cache = cache
        self.alert = alert
        self.default_region = default_region
        self.region = default_region
        self.permission = PermissionState.NOT_DETERMINED
        self.capturing = False
        location_service.set_permission_handler(self.on_permission_changed)

    # ---------- Permission ----------
    def on_screen_load(self):
        status = self.location_service.current_permission_status()
        self.permission = status
        if status is PermissionState.AUTHORIZED:
            logger.info('Already authorized to use location services - initializing')
            self.init_location_display()
        elif status is PermissionState.NOT_DETERMINED:
            logger.info('Requesting location services permission')
            self.location_service.request_permission()
        else:
            logger.warning(f'Location services permission {status.value}; map display not initialized')

    def on_permission_changed(self, state):
        self.permission = state
        if state is PermissionState.AUTHORIZED:
            logger.info('Now authorized to use location services - initializing')
            self.init_location_display()
        else:
            logger.info(f'Location permission is {state.value}')

    def init_location_display(self):
        self.region = self.default_region
        self.map_display.set_show_user_location(True)
        self.map_display.set_update_handler(self.on_location_updated)
        self.map_display.set_map_type(MapType.STANDARD)
        self.map_display.set_region(self.region, animated=False)

    # ---------- Location ----------
    def on_location_updated(self, coordinate):
        if coordinate is None:
            logger.warning('Location update without a position; not recentering')
            return
        self.region = self.region.recentered(coordinate)
        self.map_display.set_region(self.region, animated=True)

    # ---------- Snapshot ----------
    def capture_snapshot(self):
        """Rasterize what the map view shows right now and cache it as PNG.

        Annotations and the user-location marker are included because the
        live view is drawn, not re-rendered off screen.

        Returns:
            CacheFile with the path and the PNG bytes written

        Raises:
            CaptureInProgressError, ImageEncodingError, CacheIOError
        """
        if self.capturing:
            raise CaptureInProgressError()
        self.capturing = True
        try:
            image = self.map_display.render_current_view_to_image()
            data = encode_png(image)
            cache_file = self.cache.write(data)
        except Exception as e:
            logger.error(f'Snapshot failed: {e}')
            raise
        finally:
            self.capturing = False
        logger.info(f'Image saved to {cache_file.path}')
        return cache_file

    def load_snapshot(self):
        return self.cache.load_image()

    # ---------- Messaging ----------
    def send_snapshot_by_sms(self, recipients, body):
        """Present the compose flow; False when the device cannot text."""
        if not self.messenger.can_send_text():
            logger.warning('Messaging unavailable; nothing sent')
            self.alert(*MESSAGING_UNAVAILABLE)
            return False
        draft = MessageDraft(body=body, recipients=list(recipients))
        if self.messenger.can_send_attachments():
            draft.attachment = self._snapshot_attachment()
        self.messenger.compose_and_present(draft, self._on_message_finished)
        return True

    def capture_and_send(self, recipients, body):
        """Capture, then send. Returns (cache_file, sent)."""
        cache_file = self.capture_snapshot()
        sent = self.send_snapshot_by_sms(recipients, body)
        return cache_file, sent

    def _snapshot_attachment(self):
        try:
            data = self.cache.read()
        except CacheIOError as e:
            logger.error(f'Could not read snapshot for attachment: {e}')
            return None
        if data is None:
            logger.warning('No snapshot cached yet; sending without attachment')
            return None
        return Attachment(data=data, filename=self.cache.filename)

    def _on_message_finished(self, outcome):
        if outcome is SendOutcome.FAILED:
            logger.error('Message send failed')
            self.alert(*SEND_FAILED)
        elif outcome is SendOutcome.CANCELLED:
            logger.info('Message cancelled')
        elif outcome is SendOutcome.SENT:
            logger.info('Message sent')
        else:
            logger.info('Message result unknown')
