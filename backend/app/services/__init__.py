# Services package init
"""
Sparkz Backend: Services Layer
===============================

Business logic between the routes (HTTP) and the database/provider.
Each module exposes a class and a module-level singleton that routes call
and tests patch.

Service Inventory:
    - security:        password hashing, bearer token issue/verify
    - mux_client:      Mux Video REST client (provision, key reset, release)
    - image_service:   profile picture validation and square crop
    - auth_service:    signup (with live stream provisioning) and login
    - user_service:    profiles, stream keys, follow graph
    - stream_service:  stream sessions
    - chat_service:    per-session chat log
    - schedule_service: show schedule entries
"""
