from typing import Iterable, Optional, Tuple

import networkx as nx

from matplotlib import pyplot as plt
from matplotlib.patches import Patch

from gene_ontology import SubsumeTester


SUBSUMER_COLOR = "gold"
OFFSPRING_COLOR = "lightblue"
SUBSUMED_COLOR = "green"
NOT_SUBSUMED_COLOR = "red"


def plot_subsumption(
    tester: SubsumeTester,
    candidates: Iterable[str] = (),
    check_for_synonym: bool = True,
    ax: Optional[plt.Axes] = None,
    label_by_name: bool = False,
    fig_width: float = 8,
    node_size: float = 300,
    label_size: float = 6,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plots the subsumer of a SubsumeTester above its offspring, one row per generation,
    with the candidate terms colored by whether the tester subsumes them.

    Args:
        tester: The SubsumeTester whose subsumer and cached offspring are drawn.
        candidates: GO ids to test against the subsumer.
        check_for_synonym: Whether to map candidates to their primary ids first.
            Unmapped secondary ids are not part of the graph and are left out.
        ax: An optional matplotlib Axes object to plot on.
        label_by_name: Whether to label the nodes by the term names instead of their GO IDs.

    Returns:
        A tuple containing the figure and axes objects.
    """
    database = tester.go.database

    subsumed, not_subsumed = [], []

    for candidate in candidates:
        go_id = tester.go.primary_go_id(candidate) if check_for_synonym else candidate

        if go_id not in database.graph:
            continue

        if tester.subsumes(go_id, check_for_synonym=False):
            subsumed.append(go_id)
        else:
            not_subsumed.append(go_id)

    nodes = {tester.master_go_id, *tester.subsumer_offspring, *subsumed, *not_subsumed}

    # Parent to child, so the subsumer comes first in topological order.
    subgraph = database.graph.subgraph(
        node for node in nodes if node in database.graph
    ).reverse(copy=True)

    for layer, generation in enumerate(nx.topological_generations(subgraph)):
        for node in generation:
            subgraph.nodes[node]["layer"] = layer

    pos = nx.multipartite_layout(subgraph, subset_key="layer", align="horizontal")
    pos = {node: (x, -y) for node, (x, y) in pos.items()}

    if ax is None:
        fig, ax = plt.subplots(1, figsize=(fig_width, fig_width))
    else:
        fig = ax.get_figure()

    groups = (
        ("offspring", OFFSPRING_COLOR, [node for node in tester.subsumer_offspring if node in pos]),
        ("subsumed", SUBSUMED_COLOR, subsumed),
        ("not subsumed", NOT_SUBSUMED_COLOR, not_subsumed),
        ("subsumer", SUBSUMER_COLOR, [node for node in (tester.master_go_id,) if node in pos]),
    )

    handles = []

    for label, color, nodelist in groups:
        if not nodelist:
            continue

        nx.draw_networkx_nodes(
            subgraph, pos, nodelist=nodelist, ax=ax, node_color=color, node_size=node_size
        )

        handles.append(Patch(color=color, label=label))

    nx.draw_networkx_edges(subgraph, pos, ax=ax, edge_color="gray", arrows=True)

    if label_by_name:
        labels = {node: database.terms_by_id[node].term for node in subgraph.nodes()}
    else:
        labels = {node: node for node in subgraph.nodes()}

    nx.draw_networkx_labels(subgraph, pos, labels=labels, ax=ax, font_size=label_size)

    ax.legend(handles=handles, loc="upper right", fontsize=label_size)
    ax.set_axis_off()

    return fig, ax
