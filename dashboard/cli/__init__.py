"""
Command-line surface for the HygieneQuest dashboard.

Commands are thin: they call module services through the
ServiceContainer and render results with rich. Every DashboardError is
caught at the boundary in main() and shown as an error line.
"""
