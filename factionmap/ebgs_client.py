# factionmap/ebgs_client.py
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from factionmap.config import (
    EBGS_API_BASE,
    EBGS_TIMEOUT,
    EBGS_PAGE_SIZE,
    MAX_PAGES,
    SYSTEM_BATCH_SIZE,
)
from factionmap.errors import FactionNotFound, UpstreamFetchError
from factionmap.models import FactionSystemSet, StarSystem, parse_system_doc

logger = logging.getLogger(__name__)


async def _to_thread(func, *args, **kwargs):
    return await asyncio.to_thread(func, *args, **kwargs)


# --- raw HTTP ----------------------------------------------------------------
def _get_page(path: str, params: Dict[str, Any], stage: str, faction: Optional[str] = None) -> Dict[str, Any]:
    """
    GET one page from the BGS API. Anything other than a JSON object holding a
    `docs` list is an UpstreamFetchError.
    """
    url = f"{EBGS_API_BASE}/{path}"
    try:
        r = requests.get(url, params=params, timeout=EBGS_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except requests.RequestException as e:
        raise UpstreamFetchError(stage, f"GET {path} failed: {e!r}", faction) from e
    except ValueError as e:
        raise UpstreamFetchError(stage, f"GET {path} returned non-JSON body", faction) from e

    if not isinstance(data, dict) or not isinstance(data.get("docs"), list):
        raise UpstreamFetchError(stage, f"GET {path} response has no docs list", faction)
    return data


def _has_more(data: Dict[str, Any], page_size: int) -> bool:
    flag = data.get("hasNextPage")
    if isinstance(flag, bool):
        return flag
    # no flag: a short page is the last one
    return len(data["docs"]) >= page_size


def _fetch_all_pages(path: str, params: Dict[str, Any], stage: str,
                     faction: Optional[str] = None, page_size: int = EBGS_PAGE_SIZE) -> List[Dict[str, Any]]:
    docs: List[Dict[str, Any]] = []
    page = 1
    while True:
        data = _get_page(path, {**params, "page": page}, stage, faction)
        docs.extend(data["docs"])
        if not _has_more(data, page_size):
            break
        if page >= MAX_PAGES:
            logger.warning(f"[{stage}] {path} still has pages after {page} ({faction or '-'})")
            raise UpstreamFetchError(stage, "page limit reached", faction)
        page += 1
    logger.debug(f"[{stage}] {path} -> {len(docs)} doc(s) over {page} page(s)")
    return docs


# --- Presence Resolver -------------------------------------------------------
def _presence_names_sync(faction: str) -> List[str]:
    docs = _fetch_all_pages("factions", {"name": faction}, "presence", faction)

    names: List[str] = []
    seen: set[str] = set()
    matched = False
    for doc in docs:
        # upstream search is loose; only an exact, case-sensitive name counts
        if not isinstance(doc, dict) or doc.get("name") != faction:
            continue
        matched = True
        for pres in doc.get("faction_presence") or []:
            sname = pres.get("system_name") if isinstance(pres, dict) else None
            if isinstance(sname, str) and sname.strip() and sname.strip() not in seen:
                seen.add(sname.strip())
                names.append(sname.strip())

    if not matched or not names:
        raise FactionNotFound(faction)
    return names


async def resolve_presence(faction: str) -> List[str]:
    """Names of every system where `faction` has a presence, in upstream order."""
    names = await _to_thread(_presence_names_sync, faction)
    logger.info(f"Presence for {faction!r}: {len(names)} system(s)")
    return names


# --- System Data Fetcher -----------------------------------------------------
def _batches(names: List[str], size: int = SYSTEM_BATCH_SIZE) -> List[List[str]]:
    return [names[i:i + size] for i in range(0, len(names), size)]


def _system_batch_sync(batch: List[str], faction: Optional[str]) -> List[StarSystem]:
    docs = _fetch_all_pages("systems", {"name": batch}, "systems", faction)
    out: List[StarSystem] = []
    for doc in docs:
        system = parse_system_doc(doc)
        if system is not None:
            out.append(system)
    return out


async def fetch_systems(names: List[str], faction: Optional[str] = None) -> List[StarSystem]:
    """
    Resolve names to StarSystems, batched and fetched concurrently. Unknown
    names are dropped; any failed batch fails the whole fetch.
    """
    ordered: List[str] = []
    seen: set[str] = set()
    for n in names:
        key = n.casefold()
        if key not in seen:
            seen.add(key)
            ordered.append(n)
    if not ordered:
        return []

    batches = _batches(ordered)
    results = await asyncio.gather(*(_to_thread(_system_batch_sync, b, faction) for b in batches))

    by_key: Dict[str, StarSystem] = {}
    for batch_systems in results:
        for s in batch_systems:
            by_key.setdefault(s.name.casefold(), s)

    resolved = [by_key[n.casefold()] for n in ordered if n.casefold() in by_key]
    dropped = len(ordered) - len(resolved)
    if dropped:
        logger.info(f"{dropped} of {len(ordered)} system name(s) not resolved upstream ({faction or '-'})")
    return resolved


async def resolve_faction_set(faction: str, names: List[str]) -> FactionSystemSet:
    systems = await fetch_systems(names, faction)
    return FactionSystemSet(faction=faction, systems=tuple(systems))


async def resolve_both(primary: str, rival: str) -> Tuple[FactionSystemSet, FactionSystemSet]:
    """
    Presence for both factions first (concurrently), then coordinates. A
    FactionNotFound on either side stops the run before any system lookup.
    """
    primary_names, rival_names = await asyncio.gather(
        resolve_presence(primary), resolve_presence(rival)
    )
    primary_set, rival_set = await asyncio.gather(
        resolve_faction_set(primary, primary_names),
        resolve_faction_set(rival, rival_names),
    )
    return primary_set, rival_set
