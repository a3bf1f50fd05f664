"""CSV loading utilities."""
from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Dict, List, Tuple

import pandas as pd

from .models import CheckInRecord, PartyLink, Table, parse_bool, parse_optional_str, parse_pipe_list


def _require_columns(df: pd.DataFrame, required: List[str], file_label: str) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Error in {file_label}: missing columns: {', '.join(missing)}")


def load_checkins(path: Path | str | IO[Any]) -> List[CheckInRecord]:
    """Load check-in records from ``checkins.csv``.

    ``checked_in`` defaults to true when the column is absent or blank;
    ``seated`` and ``allocated`` default to false.
    """
    df = pd.read_csv(path)
    _require_columns(df, ["index", "name", "count"], "checkins.csv")
    records: List[CheckInRecord] = []
    for _, row in df.iterrows():
        records.append(
            CheckInRecord(
                index=int(row["index"]),
                name=str(row["name"]).strip(),
                count=int(row["count"]),
                show_time=parse_optional_str(row.get("show_time")) or "",
                checked_in=parse_bool(row.get("checked_in"), default=True),
                seated=parse_bool(row.get("seated")),
                allocated=parse_bool(row.get("allocated")),
            )
        )
    return records


def load_parties(path: Path | str | IO[Any], booking_indices: set[int] | None = None) -> List[PartyLink]:
    """Load party links from ``parties.csv``.

    If ``booking_indices`` is provided it validates that every member exists.
    """
    df = pd.read_csv(path, dtype={"party_id": str})
    _require_columns(df, ["party_id", "members"], "parties.csv")
    links: List[PartyLink] = []
    seen: set[str] = set()
    for _, row in df.iterrows():
        party_id = str(row["party_id"]).strip()
        if party_id in seen:
            raise ValueError(f"Error in parties.csv: duplicate party_id {party_id}")
        seen.add(party_id)
        try:
            members = [int(float(m)) for m in parse_pipe_list(row["members"])]
        except ValueError as exc:
            raise ValueError(f"Party {party_id} has a non numeric member index: {row['members']}") from exc
        if booking_indices is not None:
            unknown = [m for m in members if m not in booking_indices]
            if unknown:
                raise ValueError(f"Party {party_id} references unknown bookings: {unknown}")
        links.append(
            PartyLink(
                party_id=party_id,
                member_indices=members,
                guest_names=parse_pipe_list(row.get("guest_names", "")),
            )
        )
    return links


def load_tables(path: Path | str | IO[Any]) -> List[Table]:
    """Load table inventory."""
    df = pd.read_csv(path)
    _require_columns(df, ["id", "capacity"], "tables.csv")
    tables: List[Table] = []
    for _, row in df.iterrows():
        tables.append(
            Table(
                id=int(row["id"]),
                capacity=int(row["capacity"]),
                section=parse_optional_str(row.get("section")) or "",
                is_occupied=parse_bool(row.get("occupied")),
                show_time=parse_optional_str(row.get("show_time")),
            )
        )
    return tables


def load_all(
    checkins_path: Path | str, parties_path: Path | str | None = None
) -> Tuple[List[CheckInRecord], List[PartyLink]]:
    """Convenience wrapper returning check-in records and party links."""
    records = load_checkins(checkins_path)
    indices = {r.index for r in records}
    parties = load_parties(parties_path, indices) if parties_path else []
    return records, parties


def party_lookup(links: List[PartyLink]) -> Dict[str, PartyLink]:
    """Index party links by id, the shape the check-in desk keeps them in."""
    return {link.party_id: link for link in links}
