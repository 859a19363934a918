import logging
import re

from io import StringIO
from typing import List, Optional

import requests

from Bio import SeqIO, SwissProt

from go_db import LookupFailed


logger = logging.getLogger(__name__)

DBFETCH_URL = "https://www.ebi.ac.uk/Tools/dbfetch/dbfetch"

# UniProtKB accession format, see https://www.uniprot.org/help/accession_numbers
UNIPROT_ACCESSION = re.compile(r"[OPQ][0-9][A-Z0-9]{3}[0-9]|[A-NR-Z][0-9](?:[A-Z][A-Z0-9]{2}[0-9]){1,2}")


class DBFetch:
    """Retrieve raw database entries (PDB, UniProtKB, ...) from the EBI dbfetch service."""

    def __init__(
        self,
        url: str = DBFETCH_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        if timeout <= 0:
            raise ValueError(f"Timeout must be greater than 0, {timeout} given.")

        self.url = url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def fetch(self, db: str, entry_id: str) -> str:
        logger.info("Fetching %s entry %s from %s", db, entry_id, self.url)

        response = self.session.get(
            self.url,
            params={"db": db, "id": entry_id, "format": "default", "style": "raw"},
            timeout=self.timeout,
        )

        response.raise_for_status()

        text = response.text

        # dbfetch answers 200 with an error line for unknown entries.
        if text.startswith("ERROR"):
            raise LookupFailed(
                f"{text.strip()}: no {db} entry found for '{entry_id}'"
            )

        return text


def uniprot_accessions(pdb_text: str) -> List[str]:
    """Return the UniProt accessions a PDB entry's chains refer to, in order of first appearance."""
    references = []

    for record in SeqIO.parse(StringIO(pdb_text), "pdb-seqres"):
        references.extend(record.dbxrefs)

    references.extend(long_references(pdb_text))

    accessions = []

    # Each reference gives both the accession and the entry name (e.g. UNP:TIM44_HUMAN).
    for reference in references:
        database, _, accession = reference.partition(":")

        if database != "UNP" or not UNIPROT_ACCESSION.fullmatch(accession):
            continue

        if accession not in accessions:
            accessions.append(accession)

    return accessions


def long_references(pdb_text: str) -> List[str]:
    """Return the 'DATABASE:accession' references of DBREF1/DBREF2 record pairs, used for accessions too long for DBREF."""
    databases = {}

    references = []

    for line in pdb_text.splitlines():
        record = line[0:6]

        if record == "DBREF1":
            databases[line[7:14]] = line[26:32].strip()
        elif record == "DBREF2" and line[7:14] in databases:
            references.append(f"{databases.pop(line[7:14])}:{line[18:40].strip()}")

    return references


def cellular_component_go_ids(uniprot_text: str) -> List[str]:
    """Return the cellular component GO ids cross-referenced by a UniProtKB flat file entry."""
    record = SwissProt.read(StringIO(uniprot_text))

    return [
        reference[1]
        for reference in record.cross_references
        if reference[0] == "GO" and len(reference) > 2 and reference[2].startswith("C:")
    ]


def pdb_cellular_component_go_ids(fetcher: DBFetch, pdb_id: str) -> List[str]:
    """
    Return the cellular component GO ids annotated to the UniProtKB entries that a
    PDB entry refers to (there may be several, one per chain), without duplicates.
    """
    accessions = uniprot_accessions(fetcher.fetch("pdb", pdb_id))

    logger.info("PDB entry %s refers to UniProtKB %s", pdb_id, accessions)

    go_ids = []

    for accession in accessions:
        for go_id in cellular_component_go_ids(fetcher.fetch("uniprotkb", accession)):
            if go_id not in go_ids:
                go_ids.append(go_id)

    return go_ids
