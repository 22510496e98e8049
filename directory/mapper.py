"""
Maps Congress.gov v3 member payloads (list items and detail records) to DirectoryEntry.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from directory.models import Chamber, DirectoryEntry, Party

logger = logging.getLogger(__name__)

STATE_CODES: Dict[str, str] = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR", "california": "CA",
    "colorado": "CO", "connecticut": "CT", "delaware": "DE", "florida": "FL", "georgia": "GA",
    "hawaii": "HI", "idaho": "ID", "illinois": "IL", "indiana": "IN", "iowa": "IA",
    "kansas": "KS", "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS", "missouri": "MO",
    "montana": "MT", "nebraska": "NE", "nevada": "NV", "new hampshire": "NH", "new jersey": "NJ",
    "new mexico": "NM", "new york": "NY", "north carolina": "NC", "north dakota": "ND", "ohio": "OH",
    "oklahoma": "OK", "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT", "vermont": "VT",
    "virginia": "VA", "washington": "WA", "west virginia": "WV", "wisconsin": "WI", "wyoming": "WY",
    "district of columbia": "DC", "puerto rico": "PR", "guam": "GU", "american samoa": "AS",
    "virgin islands": "VI", "northern mariana islands": "MP",
}

_PARTIES: Dict[str, Party] = {
    "democratic": Party.DEMOCRAT,
    "democrat": Party.DEMOCRAT,
    "republican": Party.REPUBLICAN,
    "independent": Party.INDEPENDENT,
    "independent democrat": Party.INDEPENDENT,
    "green": Party.GREEN,
    "libertarian": Party.LIBERTARIAN,
}


def map_party(raw: Optional[str]) -> Optional[Party]:
    if not raw:
        return None
    return _PARTIES.get(raw.strip().lower())


def map_state(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    value = raw.strip()
    if len(value) == 2:
        return value.upper()
    return STATE_CODES.get(value.lower())


def _terms(member: Dict[str, Any]) -> List[Dict[str, Any]]:
    terms = member.get("terms") or []
    if isinstance(terms, dict):
        terms = terms.get("item") or []
    return [term for term in terms if isinstance(term, dict)]


def _latest_term(terms: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Open-ended terms count as the latest."""
    if not terms:
        return None
    return max(terms, key=lambda term: term.get("endYear") or 10_000)


def map_chamber(terms: List[Dict[str, Any]]) -> Optional[Chamber]:
    latest = _latest_term(terms)
    if latest is None:
        return None
    chamber = str(latest.get("chamber") or "").lower()
    if chamber.startswith("house"):
        return Chamber.HOUSE
    if chamber == "senate":
        return Chamber.SENATE
    return None


def years_in_office(terms: List[Dict[str, Any]], today: date) -> int:
    starts = [int(term["startYear"]) for term in terms if term.get("startYear")]
    if not starts:
        return 0
    return max(0, today.year - min(starts))


def _split_name(member: Dict[str, Any]) -> Optional[tuple]:
    first, last = member.get("firstName"), member.get("lastName")
    if first and last:
        return str(first).strip(), str(last).strip()
    name = member.get("name")
    if isinstance(name, dict):
        first, last = name.get("first"), name.get("last")
        if first and last:
            return str(first).strip(), str(last).strip()
        return None
    if isinstance(name, str) and name.strip():
        if "," in name:
            last, _, first = name.partition(",")
            return first.strip(), last.strip()
        parts = name.split()
        if len(parts) >= 2:
            return " ".join(parts[:-1]), parts[-1]
    return None


def _party_name(member: Dict[str, Any]) -> Optional[str]:
    if member.get("partyName"):
        return member["partyName"]
    history = member.get("partyHistory") or []
    if history and isinstance(history[-1], dict):
        return history[-1].get("partyName")
    return None


def map_member(member: Dict[str, Any], today: Optional[date] = None) -> Optional[DirectoryEntry]:
    """Return None (and log) for members that cannot be placed in the directory."""
    bioguide_id = member.get("bioguideId")
    if not bioguide_id:
        logger.warning("Skipping member without bioguideId")
        return None
    names = _split_name(member)
    if names is None:
        logger.warning("Skipping member %s: unparseable name", bioguide_id)
        return None
    party = map_party(_party_name(member))
    if party is None:
        logger.warning("Skipping member %s: unknown party %r", bioguide_id, _party_name(member))
        return None
    terms = _terms(member)
    chamber = map_chamber(terms)
    if chamber is None:
        logger.warning("Skipping member %s: could not determine chamber", bioguide_id)
        return None
    state = map_state(member.get("state"))
    if state is None:
        logger.warning("Skipping member %s: unknown state %r", bioguide_id, member.get("state"))
        return None

    district = member.get("district")
    address = member.get("addressInformation") or {}
    depiction = member.get("depiction") or {}
    return DirectoryEntry(
        external_id=str(bioguide_id),
        first_name=names[0],
        last_name=names[1],
        chamber=chamber,
        state=state,
        party=party,
        district=str(district) if district is not None and chamber is Chamber.HOUSE else None,
        years_in_office=years_in_office(terms, today or date.today()),
        phone_number=address.get("phoneNumber"),
        website_url=member.get("officialWebsiteUrl"),
        office_address=address.get("officeAddress"),
        photo_url=depiction.get("imageUrl"),
    )
