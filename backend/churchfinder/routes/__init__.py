"""
ChurchFinder Backend — API Routes Package
==========================================

Route Inventory:
    - churches.py:  GET   /api/churches
                    GET   /api/churches/denominations
                    GET   /api/churches/photos/{church_name}
                    GET   /api/churches/{place_id}          (find-or-create)
                    POST  /api/churches
                    PATCH /api/churches/{church_id}
                    POST  /api/churches/{church_id}/service-times
                    POST  /api/churches/{church_id}/reviews
    - maps.py:      GET   /api/maps/script
                    GET   /api/maps/photo/{reference}
    - health.py:    GET   /health

Routes stay thin: pull parameters out of the request, validate write bodies
with parse_payload(), call a service, pick the status code.
"""
