"""Distance Measurer - measure paths on an interactive map.

Click points on a map to build a polyline; every point is labeled with the
cumulative distance from the start. Finished paths stay editable: drag
points, drag a segment to insert a point, delete points from their labels.

Modules:
    core: Foundation (geodesic math, distance formatting, projection, timers)
    model: Data structures (Coordinate, PathStore, overlays, signals)
    ui: Measuring engine (gesture controller, sync engine, facade), pydeck host

Example:
    from distance_measurer.ui import DeckMapHost, MeasureTool
    host = DeckMapHost()
    tool = MeasureTool(host)
    tool.start_session()
"""
