# Routes package init
"""
Sparkz Backend: API Routes Package
===================================

Route Inventory (all under API_PREFIX, default /api):
    - health.py:    GET    /health
    - auth.py:      POST   /auth/signup, /auth/login
    - users.py:     GET/PUT /users/{id}, profile picture, stream key,
                    follow, followers, schedule
    - streams.py:   POST   /streams, GET /streams/active, POST /streams/{id}/end,
                    GET/POST /streams/{id}/chat
    - schedules.py: DELETE /schedules/{id}

Routes stay thin: authentication and ownership come from app.dependencies,
everything else is delegated to a service.
"""
