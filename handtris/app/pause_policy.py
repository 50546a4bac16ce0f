"""
Camera Pause Handler

Host-side reaction to detection edges: pause the game when the player
disappears, resume it when they come back. Only pauses that the camera
caused are undone, so a pause requested by the user is never lifted by a
regained detection.

    handler = CameraPauseHandler(game)
    session = GestureSession(game, on_detection_status_change=handler)
    pause_button.clicked.connect(lambda: (game.pause(), handler.on_user_pause()))
"""


class CameraPauseHandler:
    def __init__(self, game):
        self.game = game
        self.paused_by_camera = False

    def __call__(self, detected: bool):
        if detected:
            if self.paused_by_camera:
                print("✓ Player detected, resuming game")
                self.game.resume()
                self.paused_by_camera = False
        else:
            if self.game.is_running() and not self.paused_by_camera:
                print("⚠ Player lost, pausing game")
                self.game.pause()
                self.paused_by_camera = True

    def on_user_pause(self):
        """The user paused (or restarted) the game by hand."""
        self.paused_by_camera = False


__all__ = ['CameraPauseHandler']
