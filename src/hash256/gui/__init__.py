"""NiceGUI front end: event bus, state, controllers and views."""
