import logging

from os import path

from argparse import ArgumentParser

from go_db import GODatabase, DEFAULT_RELATIONSHIP_TYPES
from gene_ontology import GO
from go_plot import plot_subsumption
from dbfetch import DBFetch, pdb_cellular_component_go_ids


ACTIONS = ("term", "primary", "offspring", "ancestors", "subsume", "cordial", "pdb", "plot")


def main():
    parser = ArgumentParser(
        description="Query the gene ontology for term names, offspring, ancestors and subsumption."
    )

    parser.add_argument("--go_obo_path", default="./dataset/go-basic.obo", type=str)
    parser.add_argument(
        "--relationship_types", default=list(DEFAULT_RELATIONSHIP_TYPES), nargs="+", type=str
    )
    parser.add_argument("--action", default="term", choices=ACTIONS)
    parser.add_argument("--go_id", default=None, type=str)
    parser.add_argument("--other_go_ids", default=[], nargs="*", type=str)
    parser.add_argument("--pdb_id", default=None, type=str)
    parser.add_argument("--plot_path", default="./go-subsumption.png", type=str)
    parser.add_argument("--log_level", default="WARNING", type=str)

    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    if args.action == "pdb":
        if args.pdb_id is None:
            raise ValueError("A PDB id must be given with --pdb_id.")

        go_ids = pdb_cellular_component_go_ids(DBFetch(), args.pdb_id)

        print(f"Cellular component GO terms for PDB {args.pdb_id}:")

        for go_id in go_ids:
            print(go_id)

        return

    if args.go_id is None:
        raise ValueError(f"A GO id must be given with --go_id for action '{args.action}'.")

    if args.action == "subsume" and not args.other_go_ids:
        raise ValueError("The subsumed GO ids must be given with --other_go_ids.")

    if not path.exists(args.go_obo_path):
        raise FileNotFoundError(
            f"GO OBO file {args.go_obo_path} not found. Please check the path."
        )

    go = GO(GODatabase(args.go_obo_path, args.relationship_types))

    if args.action == "term":
        print(f"{args.go_id} [{go.ontology_abbreviation(args.go_id)}]: {go.term(args.go_id)}")

    elif args.action == "primary":
        print(go.primary_go_id(args.go_id))

    elif args.action == "offspring":
        offspring = go.go_offspring(go.primary_go_id(args.go_id))

        print(f"{len(offspring)} offspring of {args.go_id}:")

        for go_id in offspring:
            print(f"{go_id}: {go.term(go_id)}")

    elif args.action == "ancestors":
        ancestors = go.go_ancestors(go.primary_go_id(args.go_id))

        print(f"{len(ancestors)} ancestors of {args.go_id}:")

        for go_id in ancestors:
            print(f"{go_id}: {go.term(go_id)}")

    elif args.action == "subsume":
        tester = go.subsume_tester(args.go_id)

        for other_go_id in args.other_go_ids:
            subsumes = tester.subsumes(other_go_id)

            print(f"{args.go_id} {'subsumes' if subsumes else 'does not subsume'} {other_go_id}")

    elif args.action == "cordial":
        for go_id in go.cordial_cc(go.primary_go_id(args.go_id)):
            print(f"{go_id}: {go.term(go_id)}")

    elif args.action == "plot":
        fig, _ = plot_subsumption(
            go.subsume_tester(args.go_id), args.other_go_ids, label_by_name=True
        )

        fig.savefig(args.plot_path)

        print(f"Saved subsumption plot of {args.go_id} to {args.plot_path}")


if __name__ == "__main__":
    main()
