"""OSV.dev vulnerability annotator."""

import asyncio
import logging
from typing import Any, Optional, Sequence

import httpx
from cvss import CVSS3
from cvss.exceptions import CVSS3Error

from depscope.models import (
    Ecosystem,
    Package,
    Severity,
    Vulnerability,
    VulnerabilitySummary,
)
from depscope.vulnerabilities.base import VulnerabilityAnnotator

logger = logging.getLogger(__name__)

# depscope ecosystem → OSV ecosystem name
OSV_ECOSYSTEMS: dict[Ecosystem, str] = {
    Ecosystem.pypi: "PyPI",
    Ecosystem.npm: "npm",
}

# OSV rejects larger querybatch payloads
BATCH_SIZE = 1000


class OSVAnnotator(VulnerabilityAnnotator):
    """Looks packages up with ``/v1/querybatch`` and ``/v1/vulns/<id>``.

    Only packages with an ecosystem and a concrete version are queried; a
    ``"*"`` version would match every advisory ever published for the name.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://api.osv.dev",
        max_concurrency: int = 16,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.max_concurrency = max_concurrency

    async def annotate(self, packages: Sequence[Package]) -> list[Package]:
        annotated = list(packages)
        queryable = [(i, pkg) for i, pkg in enumerate(annotated) if _is_queryable(pkg)]
        if not queryable:
            return annotated

        try:
            ids_per_package = await self.query_batch([pkg for _, pkg in queryable])
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "OSV query failed for %d packages, continuing without vulnerability data: %s",
                len(queryable),
                e,
            )
            return annotated

        unique_ids = list(dict.fromkeys(v for ids in ids_per_package for v in ids))
        details = await self.fetch_vulnerabilities(unique_ids)

        for (index, pkg), ids in zip(queryable, ids_per_package):
            summary = VulnerabilitySummary.from_vulnerabilities([details[v] for v in ids])
            if summary is not None:
                annotated[index] = pkg.with_vulnerabilities(summary)
        return annotated

    # ── OSV API ───────────────────────────────────────────────────────────

    async def query_batch(self, packages: list[Package]) -> list[list[str]]:
        """Vulnerability ids affecting each package, in input order."""
        ids_per_package: list[list[str]] = []
        for start in range(0, len(packages), BATCH_SIZE):
            chunk = packages[start:start + BATCH_SIZE]
            body = {
                "queries": [
                    {
                        "version": pkg.version,
                        "package": {
                            "name": pkg.name,
                            "ecosystem": OSV_ECOSYSTEMS[pkg.ecosystem],  # type: ignore[index]
                        },
                    }
                    for pkg in chunk
                ]
            }
            resp = await self.client.post(f"{self.base_url}/v1/querybatch", json=body)
            resp.raise_for_status()
            results = resp.json()["results"]
            if len(results) != len(chunk):
                raise ValueError(
                    f"OSV returned {len(results)} results for {len(chunk)} queries"
                )
            for result in results:
                ids_per_package.append([v["id"] for v in (result or {}).get("vulns", [])])
        return ids_per_package

    async def fetch_vulnerabilities(self, vuln_ids: list[str]) -> dict[str, Vulnerability]:
        """Details for each id; failed lookups become UNKNOWN-severity entries."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _fetch(vuln_id: str) -> Vulnerability:
            async with semaphore:
                try:
                    resp = await self.client.get(f"{self.base_url}/v1/vulns/{vuln_id}")
                    resp.raise_for_status()
                    return parse_osv_vulnerability(resp.json())
                except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.warning("Could not fetch OSV details for %s: %s", vuln_id, e)
                    return Vulnerability(name=vuln_id)

        fetched = await asyncio.gather(*(_fetch(v) for v in vuln_ids))
        return dict(zip(vuln_ids, fetched))


def _is_queryable(pkg: Package) -> bool:
    return not pkg.is_root and not pkg.is_latest and pkg.ecosystem in OSV_ECOSYSTEMS


# ── Record parsing ────────────────────────────────────────────────────────

def parse_osv_vulnerability(data: dict[str, Any]) -> Vulnerability:
    """Convert an OSV vulnerability record."""
    vuln_id = data["id"]
    score = cvss_score(data)
    severity = Severity.parse((data.get("database_specific") or {}).get("severity"))
    if severity is Severity.unknown:
        severity = Severity.from_score(score)
    return Vulnerability(
        name=data.get("summary") or vuln_id,
        severity=severity,
        score=score or 0.0,
        cve_id=_cve_alias(vuln_id, data.get("aliases") or []),
    )


def cvss_score(data: dict[str, Any]) -> Optional[float]:
    """Base score of the first parseable CVSS v3 vector, if any."""
    for entry in data.get("severity") or []:
        if entry.get("type") != "CVSS_V3":
            continue
        try:
            return float(CVSS3(entry["score"]).base_score)
        except (CVSS3Error, KeyError, ValueError) as e:
            logger.debug("Unparseable CVSS vector in %s: %s", data.get("id"), e)
    return None


def _cve_alias(vuln_id: str, aliases: list[str]) -> Optional[str]:
    if vuln_id.startswith("CVE-"):
        return vuln_id
    return next((a for a in aliases if a.startswith("CVE-")), None)
