"""
ChurchFinder Backend — Services Layer
======================================

What:  Everything between the routes (HTTP) and the database / Google APIs.

Service Inventory:
    - ChurchService:        find-by-place-id, find-or-create, create, update,
                            list, denominations
    - ServiceTimeService:   add a weekly service time to a church
    - ReviewService:        add a review to a church
    - MapsService:          map credential + place photo proxy
    - PhotoSearchService:   custom image search for a church exterior

The database services are stateless and receive the request's session.
The proxy services hold Settings and the shared httpx client and are built
once by the app factory.
"""
