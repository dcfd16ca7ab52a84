from sonar_viewer.controllers.viewport_controller import (
    CursorReadout,
    RulerMarker,
    SonarViewportController,
)
