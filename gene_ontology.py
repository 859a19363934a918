"""
A query interface to the Gene Ontology. Each method translates into a lookup of a GO
identifier in a named partition of a GODatabase, and wraps the result.
It answers offspring, ancestor and subsumption questions, and maps PDB entries
to cellular component annotations through the EBI dbfetch service.
"""
import logging

from typing import List, Optional

from go_db import GODatabase, LookupFailed
from dbfetch import DBFetch, pdb_cellular_component_go_ids


logger = logging.getLogger(__name__)


class GO:
    """
    Query the Gene Ontology for term names, offspring, ancestors and subsumption.

    Args:
        database: The GODatabase to query.
        fetcher: The client used by cc_pdb_to_go to retrieve PDB and UniProtKB entries.
            A DBFetch client is created on first use if none is given.
    """

    def __init__(self, database: GODatabase, fetcher: Optional[DBFetch] = None):
        self.database = database
        self.fetcher = fetcher

    def go_get(self, go_id: str, partition: str) -> List[str]:
        """Generic lookup, e.g. go_get('GO:0042717', 'GOCCCHILDREN'). No related terms gives []."""
        answers = self.database.get(go_id, partition)

        if answers is None:
            return []

        return answers

    def go_offspring(self, go_id: str) -> List[str]:
        """
        Return the offspring (all the descendants) of a GO term from any ontology
        (cellular component, biological process or molecular function).
        """
        ontology = self.ontology_abbreviation(go_id)

        if ontology == "MF":
            return self.molecular_function_offspring(go_id)
        elif ontology == "CC":
            return self.cellular_component_offspring(go_id)
        elif ontology == "BP":
            return self.biological_process_offspring(go_id)

        raise ValueError(
            f"Unknown ontology abbreviation found: {ontology} for go id: {go_id}"
        )

    def cellular_component_offspring(self, go_id: str) -> List[str]:
        return self.go_get(go_id, "GOCCOFFSPRING")

    def molecular_function_offspring(self, go_id: str) -> List[str]:
        return self.go_get(go_id, "GOMFOFFSPRING")

    def biological_process_offspring(self, go_id: str) -> List[str]:
        return self.go_get(go_id, "GOBPOFFSPRING")

    def go_ancestors(self, go_id: str) -> List[str]:
        """Return the ancestors of a GO term from any ontology."""
        ontology = self.ontology_abbreviation(go_id)

        if ontology == "MF":
            return self.ancestors_mf(go_id)
        elif ontology == "CC":
            return self.ancestors_cc(go_id)
        elif ontology == "BP":
            return self.ancestors_bp(go_id)

        raise ValueError(
            f"Unknown ontology abbreviation found: {ontology} for go id: {go_id}"
        )

    def ancestors_cc(self, go_id: str) -> List[str]:
        return self.go_get(go_id, "GOCCANCESTOR")

    def ancestors_mf(self, go_id: str) -> List[str]:
        return self.go_get(go_id, "GOMFANCESTOR")

    def ancestors_bp(self, go_id: str) -> List[str]:
        return self.go_get(go_id, "GOBPANCESTOR")

    def primary_go_id(self, go_id_or_synonym_id: str) -> str:
        """
        Given a GO id such as GO:0048253, return the primary id of its term (GO:0050333),
        so that the offspring methods can be used.

        Raises:
            LookupFailed: If the id is neither a primary id nor a secondary id.
        """
        # Most ids passed in are primary, so GOTERM is tried first.
        try:
            return self.database.get(go_id_or_synonym_id, "GOTERM").go_id
        except LookupFailed:
            try:
                return self.database.get(go_id_or_synonym_id, "GOSYNONYM").go_id
            except LookupFailed as e:
                raise LookupFailed(
                    f"{e}: GO Identifier '{go_id_or_synonym_id}' does not appear to be a "
                    "primary ID nor synonym. Is the GO database up to date?"
                ) from e

    def term(self, go_id: str) -> str:
        """Return the name of a GO term."""
        return self.database.get(go_id, "GOTERM").term

    def ontology_abbreviation(self, go_id: str) -> str:
        """Return 'MF', 'CC' or 'BP' for a primary GO id."""
        return self.database.get(go_id, "GOTERM").ontology

    def subsumes(self, subsumer_go_id: str, subsumee_go_id: str) -> bool:
        """
        Does the subsumer subsume the subsumee, i.e. is the subsumee the same term
        or one of its offspring? Secondary ids are mapped to primary ids first.

        When testing many terms against the same subsumer, subsume_tester is faster.
        """
        primaree = self.primary_go_id(subsumee_go_id)
        primarer = self.primary_go_id(subsumer_go_id)

        if primaree == primarer:
            return True

        return primaree in self.go_offspring(primarer)

    def subsume_tester(
        self, subsumer_go_id: str, check_for_synonym: bool = True
    ) -> "SubsumeTester":
        return SubsumeTester(self, subsumer_go_id, check_for_synonym)

    def cordial_cc(self, primary_go_id: str) -> List[str]:
        """
        Return the ancestors of a cellular component term or of any of its offspring,
        excluding the term itself and its offspring.

        This tells whether an annotation can overlap with the term. 'membrane' is
        cordial with 'nucleus' since both are ancestors of 'nuclear membrane', while
        'mitochondrion' and 'nucleus' are not, they share no offspring.
        """
        cordial_ids = list(self.ancestors_cc(primary_go_id))

        offspring = self.cellular_component_offspring(primary_go_id)

        for go_id in offspring:
            cordial_ids.extend(self.ancestors_cc(go_id))

        excluded = set(offspring)
        excluded.add(primary_go_id)

        seen = set()
        cordial = []

        for go_id in cordial_ids:
            if go_id in excluded or go_id in seen:
                continue

            seen.add(go_id)
            cordial.append(go_id)

        return cordial

    def cc_pdb_to_go(self, pdb_id: str) -> List[str]:
        """
        Return the cellular component GO ids annotated to the UniProtKB entries that a
        PDB entry refers to (there may be several, one per chain).
        """
        if self.fetcher is None:
            self.fetcher = DBFetch()

        return pdb_cellular_component_go_ids(self.fetcher, pdb_id)


class SubsumeTester:
    """
    Test repeatedly whether one GO term subsumes others. The offspring of the
    subsumer are looked up once and kept in a set, which is faster than calling
    GO.subsumes for each term.

    Args:
        go: The GO query interface.
        subsumer_go_id: The subsuming GO id.
        check_for_synonym: Whether to map subsumer_go_id to its primary id first.
    """

    def __init__(self, go: GO, subsumer_go_id: str, check_for_synonym: bool = True):
        self.go = go

        if check_for_synonym:
            self.master_go_id = go.primary_go_id(subsumer_go_id)
        else:
            self.master_go_id = subsumer_go_id

        self.subsumer_offspring = go.go_offspring(self.master_go_id)
        self.subsumer_offspring_set = set(self.subsumer_offspring)

        logger.debug("Cached %d offspring of %s", len(self.subsumer_offspring_set), self.master_go_id)

    def subsumes(self, go_id: str, check_for_synonym: bool = True) -> bool:
        primaree = self.go.primary_go_id(go_id) if check_for_synonym else go_id

        if primaree == self.master_go_id:
            return True

        return primaree in self.subsumer_offspring_set
