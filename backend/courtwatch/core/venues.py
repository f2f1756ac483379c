"""
Tracked venues and booking links.

Each venue is served by one booking platform; the platform picks the fetcher
(see services.fetchers) and the shape of the booking URL.
"""

COURTSIDE_HOST = "tennistowerhamlets.com"

VENUES: list[dict] = [
    # Courtside platform (Tower Hamlets)
    {"slug": "bethnal-green-gardens", "name": "Bethnal Green Gardens", "platform": "courtside"},
    {"slug": "king-edward-memorial-park", "name": "King Edward Memorial Park", "platform": "courtside"},
    {"slug": "poplar-rec-ground", "name": "Poplar Rec Ground", "platform": "courtside"},
    {"slug": "ropemakers-field", "name": "Ropemakers Field", "platform": "courtside"},
    {"slug": "st-johns-park", "name": "St Johns Park", "platform": "courtside"},
    {"slug": "victoria-park", "name": "Victoria Park", "platform": "courtside"},
    {"slug": "wapping-gardens", "name": "Wapping Gardens", "platform": "courtside"},
    # ClubSpark platform (LTA venues)
    {
        "slug": "stratford-park",
        "name": "Stratford Park",
        "platform": "clubspark",
        "external_id": "stratford_newhamparkstennis_org_uk",
        "host": "stratford.newhamparkstennis.org.uk",
    },
    {
        "slug": "abbotts-park",
        "name": "Abbotts Park",
        "platform": "clubspark",
        "external_id": "abbotts_playtenniswalthamforest_com",
        "host": "abbotts.playtenniswalthamforest.com",
    },
    {
        "slug": "west-ham-park",
        "name": "West Ham Park",
        "platform": "clubspark",
        "external_id": "WestHamPark",
        "host": "clubspark.lta.org.uk",
    },
]

_BY_SLUG = {v["slug"]: v for v in VENUES}


def get_venue_config(slug: str) -> dict | None:
    return _BY_SLUG.get(slug)


def booking_url(
    slug: str,
    date_str: str | None = None,
    *,
    platform: str | None = None,
    host: str | None = None,
    external_id: str | None = None,
) -> str:
    """Booking page for a venue (and date when given). Falls back to VENUES for missing fields."""
    cfg = _BY_SLUG.get(slug) or {}
    platform = platform or cfg.get("platform") or "courtside"
    host = host or cfg.get("host")
    external_id = external_id or cfg.get("external_id")

    if platform == "clubspark" and host and external_id:
        # The main LTA site keeps the venue id in the path; custom hosts do not
        if host == "clubspark.lta.org.uk":
            base = f"https://{host}/{external_id}/Booking/BookByDate"
        else:
            base = f"https://{host}/Booking/BookByDate"
        return f"{base}#?date={date_str}&role=guest" if date_str else base

    base = f"https://{COURTSIDE_HOST}/book/courts/{slug}"
    return f"{base}/{date_str}" if date_str else base
