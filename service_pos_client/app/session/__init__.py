"""
Session package for the POS client.

- models: SessionView, SessionUser and the render snapshot.
- controller: The state machine that picks exactly one full-screen view
  (loading, splash, activation, login, app) and layers the welcome
  modal over the app.
"""
