"""Visual building blocks shared by the renderer and exporters."""
