"""
Directory entry encoding: camelCase JSON for the wire, snake_case rows for SQL tables.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from directory.models import Chamber, DirectoryEntry, Party


def entry_to_dict(entry: DirectoryEntry) -> Dict[str, Any]:
    return {
        "externalId": entry.external_id,
        "firstName": entry.first_name,
        "lastName": entry.last_name,
        "displayName": entry.display_name,
        "chamber": entry.chamber.value,
        "state": entry.state,
        "district": entry.district,
        "seat": entry.seat_label,
        "party": entry.party.value,
        "yearsInOffice": entry.years_in_office,
        "phoneNumber": entry.phone_number,
        "websiteUrl": entry.website_url,
        "officeAddress": entry.office_address,
        "photoUrl": entry.photo_url,
        "bio": entry.bio,
        "linkedUserId": entry.linked_user_id,
    }


def entry_to_row(entry: DirectoryEntry, id_column: str = "external_id", user_column: str = "linked_user_id") -> Dict[str, Any]:
    return {
        id_column: entry.external_id,
        "first_name": entry.first_name,
        "last_name": entry.last_name,
        "chamber": entry.chamber.value,
        "state": entry.state,
        "district": entry.district,
        "party": entry.party.value,
        "years_in_office": entry.years_in_office,
        "phone_number": entry.phone_number,
        "website_url": entry.website_url,
        "office_address": entry.office_address,
        "photo_url": entry.photo_url,
        "bio": entry.bio,
        user_column: entry.linked_user_id,
    }


def row_to_entry(row: Mapping[str, Any], id_column: str = "external_id", user_column: str = "linked_user_id") -> DirectoryEntry:
    return DirectoryEntry(
        external_id=row[id_column],
        first_name=row["first_name"],
        last_name=row["last_name"],
        chamber=Chamber(row["chamber"]),
        state=row["state"],
        district=row["district"],
        party=Party(row["party"]),
        years_in_office=row["years_in_office"] or 0,
        phone_number=row["phone_number"],
        website_url=row["website_url"],
        office_address=row["office_address"],
        photo_url=row["photo_url"],
        bio=row["bio"],
        linked_user_id=row[user_column],
    )
