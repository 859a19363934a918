"""
An in-process Gene Ontology database built from the GO OBO release file.
Terms are looked up by identifier within a named partition, following the
GO.db naming scheme (GOTERM, GOSYNONYM, GOCCOFFSPRING, GOMFANCESTOR, ...).
"""
import logging
import re

from pathlib import Path
from typing import NamedTuple, Optional, Union, Iterable, List, Dict, Tuple

import obonet

from networkx import DiGraph, ancestors, descendants, is_directed_acyclic_graph


logger = logging.getLogger(__name__)

NAMESPACE_ABBREVIATIONS = {
    "molecular_function": "MF",
    "cellular_component": "CC",
    "biological_process": "BP",
}

DEFAULT_RELATIONSHIP_TYPES = ("is_a", "part_of")

TERM_PARTITION = "GOTERM"
SYNONYM_PARTITION = "GOSYNONYM"

RELATION_SUFFIXES = ("OFFSPRING", "ANCESTOR", "CHILDREN", "PARENTS")

# The quoted text of a def or synonym tag, before its scope and cross-references.
QUOTED_TEXT = re.compile(r'^"((?:[^"\\]|\\.)*)"')


class LookupFailed(LookupError):
    """Raised when an identifier is not a key of the queried partition."""


class GOTerm(NamedTuple):
    go_id: str
    term: str
    ontology: str
    definition: str
    synonyms: Tuple[str, ...]
    secondary: Tuple[str, ...]


def parse_partition(partition: str) -> tuple[str, str]:
    """Split a relation partition name such as 'GOCCOFFSPRING' into ('CC', 'OFFSPRING')."""
    if not partition.startswith("GO"):
        raise ValueError(f"Partition '{partition}' is invalid.")

    ontology, relation = partition[2:4], partition[4:]

    if ontology not in NAMESPACE_ABBREVIATIONS.values() or relation not in RELATION_SUFFIXES:
        raise ValueError(f"Partition '{partition}' is invalid.")

    return ontology, relation


def quoted_text(value: str) -> str:
    """Return the quoted text of an OBO def or synonym value, e.g. '"membrane" EXACT []' gives 'membrane'."""
    match = QUOTED_TEXT.match(value)

    if match is None:
        return value

    return match.group(1).replace('\\"', '"')


class GODatabase:
    """
    Gene Ontology terms and their relationships, loaded from an OBO file.

    Edges point from a term to its parent, one edge per relationship of a type
    listed in relationship_types. Relations are never followed across ontologies.

    Args:
        obo_path: The path to the GO OBO file (e.g. go-basic.obo).
        relationship_types: The relationship types that link a term to its parents.
    """

    def __init__(
        self,
        obo_path: Union[Path, str],
        relationship_types: Iterable[str] = DEFAULT_RELATIONSHIP_TYPES,
    ):
        relationship_types = set(relationship_types)

        if len(relationship_types) == 0:
            raise ValueError("At least one relationship type must be given.")

        logger.info("Reading GO ontology from %s", obo_path)

        source = obonet.read_obo(str(obo_path))

        graph = DiGraph()

        self.terms_by_id: Dict[str, GOTerm] = {}
        self.primary_ids: Dict[str, str] = {}

        for go_id, node in source.nodes(data=True):
            namespace = node.get("namespace")

            if namespace not in NAMESPACE_ABBREVIATIONS:
                continue

            term = GOTerm(
                go_id=go_id,
                term=node.get("name", ""),
                ontology=NAMESPACE_ABBREVIATIONS[namespace],
                definition=quoted_text(node.get("def", "")),
                synonyms=tuple(quoted_text(synonym) for synonym in node.get("synonym", [])),
                secondary=tuple(node.get("alt_id", [])),
            )

            self.terms_by_id[go_id] = term

            for alt_id in term.secondary:
                self.primary_ids[alt_id] = go_id

            graph.add_node(go_id, ontology=term.ontology)

        for child, parent, relationship_type in source.edges(keys=True):
            if relationship_type not in relationship_types:
                continue

            if child not in self.terms_by_id or parent not in self.terms_by_id:
                continue

            # Relations stay within one ontology branch, as in the per-branch tables.
            if self.terms_by_id[child].ontology != self.terms_by_id[parent].ontology:
                continue

            graph.add_edge(child, parent, relationship_type=relationship_type)

        if not is_directed_acyclic_graph(graph):
            raise ValueError("Invalid gene ontology network.")

        self.graph = graph
        self.relationship_types = relationship_types

        logger.info(
            "Loaded %d GO terms with %d relationships and %d secondary ids (data-version %s)",
            graph.number_of_nodes(),
            graph.number_of_edges(),
            len(self.primary_ids),
            source.graph.get("data-version", "unknown"),
        )

    def __len__(self) -> int:
        return len(self.terms_by_id)

    def __contains__(self, go_id: str) -> bool:
        return go_id in self.terms_by_id

    def terms(self, ontology: Optional[str] = None) -> List[str]:
        """Return the sorted primary ids, optionally restricted to one ontology ('MF', 'CC' or 'BP')."""
        return sorted(
            go_id
            for go_id, term in self.terms_by_id.items()
            if ontology is None or term.ontology == ontology
        )

    def get(self, go_id: str, partition: str) -> Union[GOTerm, List[str], None]:
        """
        Look up a GO identifier in a named partition.

        Args:
            go_id: The GO identifier used as the key.
            partition: GOTERM, GOSYNONYM, or GO<MF|CC|BP><OFFSPRING|ANCESTOR|CHILDREN|PARENTS>.

        Returns:
            A GOTerm for GOTERM and GOSYNONYM. For relation partitions a sorted list
            of GO ids, or None when the term has no related terms.

        Raises:
            LookupFailed: If go_id is not a key of the partition.
            ValueError: If the partition name is unknown.
        """
        logger.debug("get('%s', %s)", go_id, partition)

        if partition == TERM_PARTITION:
            if go_id not in self.terms_by_id:
                raise LookupFailed(f"value for '{go_id}' not found")

            return self.terms_by_id[go_id]

        if partition == SYNONYM_PARTITION:
            if go_id not in self.primary_ids:
                raise LookupFailed(f"value for '{go_id}' not found")

            return self.terms_by_id[self.primary_ids[go_id]]

        ontology, relation = parse_partition(partition)

        term = self.terms_by_id.get(go_id)

        if term is None or term.ontology != ontology:
            raise LookupFailed(f"value for '{go_id}' not found")

        if relation == "OFFSPRING":
            related = ancestors(self.graph, go_id)
        elif relation == "ANCESTOR":
            related = descendants(self.graph, go_id)
        elif relation == "CHILDREN":
            related = self.graph.predecessors(go_id)
        else:
            related = self.graph.successors(go_id)

        related = sorted(related)

        if not related:
            return None

        return related
