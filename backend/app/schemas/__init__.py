"""
Sparkz Backend: Pydantic Request/Response Schemas
==================================================

Request bodies keep the camelCase field names the mobile and web clients
already send (djName, showName); responses keep the snake_case column names
those clients already read (dj_name, show_name). Both are declared through
aliases so the Python side stays snake_case.
"""
