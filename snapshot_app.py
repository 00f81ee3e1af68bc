# coding: utf-8
# Map Snapshot Demo: live map with user location, snapshot to cache, send by text
# Pythonista 3 (iPhone, portrait)

import logging

import dialogs
import ui

from snapshot_demo.cache import SnapshotCache
from snapshot_demo.controller import ScreenController
from snapshot_demo.model import SnapshotError
from snapshot_demo.pythonista import (
    PythonistaLocationService, PythonistaMapView, PythonistaMessenger, alert,
)

logger = logging.getLogger('snapshot_app')

# ===== Theme =====
BG_COLOR        = '#f2f2f7'
CARD_BG         = '#ffffff'
CARD_SHADOW     = (0, 0, 0, 0.08)
ACCENT_BLUE     = '#0a84ff'
ACCENT_GREEN    = '#34c759'
TEXT_PRIMARY    = '#111111'
TEXT_SECONDARY  = '#6c6c70'
ACTIVITY_STYLE  = getattr(ui, 'ACTIVITY_INDICATOR_STYLE_GRAY', getattr(ui, 'ACTIVITY_INDICATOR_STYLE_WHITE', 0))

SCREEN_W, SCREEN_H = 430, 932
DEFAULT_MESSAGE = 'Here is where I am right now.'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _apply_card_style(view):
    view.bg_color = CARD_BG
    view.corner_radius = 18
    view.shadow_color = CARD_SHADOW
    view.shadow_offset = (0, 8)
    view.shadow_radius = 16

def _apply_primary_button(btn):
    btn.font = ('<System-Bold>', 17)
    btn.background_color = ACCENT_BLUE
    btn.tint_color = 'white'
    btn.corner_radius = 10

def _apply_outline_button(btn, color):
    btn.font = ('<System-Semibold>', 16)
    btn.corner_radius = 10
    btn.border_width = 1
    btn.border_color = color
    btn.tint_color = color


# ---------- Screen ----------
class SnapshotScreen(ui.View):
    def __init__(self, cache=None):
        super().__init__(frame=(0, 0, SCREEN_W, SCREEN_H), bg_color=BG_COLOR)
        self.name = 'Map Snapshot'
        self._build()
        self._layout()
        self.controller = ScreenController(
            location_service=PythonistaLocationService(),
            map_display=self.map_view,
            messenger=PythonistaMessenger(),
            cache=cache or SnapshotCache(),
            alert=alert,
        )

    def _build(self):
        self.hero_lbl = ui.Label(text='Map Snapshot', alignment=0)
        self.hero_lbl.font = ('<System-Bold>', 26)
        self.hero_lbl.text_color = TEXT_PRIMARY

        self.map_card = ui.View()
        _apply_card_style(self.map_card)
        self.map_view = PythonistaMapView()
        self.map_view.corner_radius = 12
        self.map_card.add_subview(self.map_view)

        self.snap_btn = ui.Button(title='Take Snapshot', action=self.on_snapshot)
        _apply_primary_button(self.snap_btn)

        self.send_btn = ui.Button(title='Snapshot & Text', action=self.on_send)
        _apply_outline_button(self.send_btn, ACCENT_GREEN)

        self.status_lbl = ui.Label(text='Waiting for location permission…', alignment=0)
        self.status_lbl.text_color = TEXT_SECONDARY
        self.status_lbl.font = ('<System>', 13)
        self.status_lbl.number_of_lines = 2

        self.activity = ui.ActivityIndicator(style=ACTIVITY_STYLE)
        self.activity.hides_when_stopped = True

        for v in (self.hero_lbl, self.map_card, self.snap_btn, self.send_btn, self.status_lbl, self.activity):
            self.add_subview(v)

    def _layout(self):
        pad = 20
        width = self.width - 2*pad
        y = 32

        self.hero_lbl.frame = (pad, y, width, 32)
        y += 44

        map_h = max(240, self.height - y - 200)
        self.map_card.frame = (pad, y, width, map_h)
        self.map_view.frame = (8, 8, width - 16, map_h - 16)
        y += map_h + 18

        half = (width - 12) / 2
        self.snap_btn.frame = (pad, y, half, 44)
        self.send_btn.frame = (pad + half + 12, y, half, 44)
        y += 58

        self.status_lbl.frame = (pad, y, width - 40, 40)
        self.activity.frame = (pad + width - 30, y + 6, 24, 24)

    def layout(self): self._layout()

    def did_load_screen(self):
        self.controller.on_screen_load()

    def will_close(self):
        # only the presented root view gets will_close
        self.map_view.set_show_user_location(False)

    # ---------- Actions ----------
    def set_status(self, text):
        self.status_lbl.text = text

    def _set_busy(self, busy=True, status=None):
        for v in (self.snap_btn, self.send_btn):
            v.enabled = not busy
        if busy:
            self.activity.start()
        else:
            self.activity.stop()
        if status:
            self.set_status(status)

    @ui.in_background
    def on_snapshot(self, s):
        self._set_busy(True, status='Capturing map…')
        try:
            cache_file = self.controller.capture_snapshot()
        except SnapshotError as e:
            self._set_busy(False, status='Snapshot failed.')
            dialogs.alert('Snapshot Failed', str(e), 'OK', hide_cancel_button=True)
            return
        self._set_busy(False, status=f'Image saved to {cache_file.path}')

    @ui.in_background
    def on_send(self, s):
        try:
            to = dialogs.input_alert('Send Snapshot', 'Recipient phone number', '', 'Next')
            body = dialogs.text_dialog('Message', DEFAULT_MESSAGE)
        except KeyboardInterrupt:
            return
        if body is None:
            return
        recipients = [r.strip() for r in to.split(',') if r.strip()]
        self._set_busy(True, status='Capturing map…')
        try:
            _, sent = self.controller.capture_and_send(recipients, body)
        except SnapshotError as e:
            self._set_busy(False, status='Snapshot failed; nothing sent.')
            dialogs.alert('Snapshot Failed', str(e), 'OK', hide_cancel_button=True)
            return
        if sent:
            self._set_busy(False, status='Snapshot saved. Opening Messages…')
        else:
            self._set_busy(False, status='Snapshot saved. Messages unavailable; nothing sent.')


def main():
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    screen = SnapshotScreen()
    screen.present('fullscreen', hide_title_bar=False)
    screen.did_load_screen()

if __name__ == '__main__':
    main()
