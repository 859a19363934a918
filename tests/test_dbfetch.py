import unittest

from unittest.mock import MagicMock, patch

import requests

from go_db import LookupFailed
from dbfetch import (
    DBFetch,
    DBFETCH_URL,
    uniprot_accessions,
    cellular_component_go_ids,
    pdb_cellular_component_go_ids,
)


def dbref_line(chain, database, accession, id_code):
    return f"DBREF  1ABC {chain}    1   120  {database:<6} {accession:<8} {id_code:<12}   1    120"


def seqres_line(chain):
    return f"SEQRES   1 {chain}    4  MET VAL LEU SER"


UNIPROT_ENTRY = """ID   TIM44_HUMAN             Reviewed;          10 AA.
AC   O43615;
DT   15-JUL-1999, integrated into UniProtKB/Swiss-Prot.
DT   01-OCT-2002, sequence version 2.
DT   24-JAN-2024, entry version 190.
DE   RecName: Full=Mitochondrial import inner membrane translocase subunit TIM44;
OS   Homo sapiens (Human).
OX   NCBI_TaxID=9606;
DR   EMBL; AF026030; AAC39908.1; -; mRNA.
DR   GO; GO:0005743; C:mitochondrial inner membrane; IDA:UniProtKB.
DR   GO; GO:0051087; F:protein-folding chaperone binding; IBA:GO_Central.
DR   GO; GO:0005759; C:mitochondrial matrix; TAS:Reactome.
SQ   SEQUENCE   10 AA;  1072 MW;  3A7D1C1F9E2B4C55 CRC64;
     MAAAAGSRRL
//
"""


class TestDBFetch(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.response = MagicMock()
        self.response.text = "HEADER    TEST ENTRY\nEND\n"
        self.session.get.return_value = self.response

    def test_fetch(self):
        fetcher = DBFetch(session=self.session)

        text = fetcher.fetch("pdb", "2a06")

        self.assertEqual(text, self.response.text)
        self.response.raise_for_status.assert_called_once()
        self.session.get.assert_called_once_with(
            DBFETCH_URL,
            params={"db": "pdb", "id": "2a06", "format": "default", "style": "raw"},
            timeout=30,
        )

    def test_fetch_error_entry(self):
        self.response.text = "ERROR 12 No entries found.\n"

        with self.assertRaises(LookupFailed) as context:
            DBFetch(session=self.session).fetch("uniprotkb", "NOTHING")

        self.assertIn("no uniprotkb entry found for 'NOTHING'", str(context.exception))

    def test_fetch_http_error(self):
        self.response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")

        with self.assertRaises(requests.HTTPError):
            DBFetch(session=self.session).fetch("pdb", "2a06")

    def test_invalid_timeout(self):
        with self.assertRaises(ValueError) as context:
            DBFetch(timeout=0, session=self.session)

        self.assertIn("Timeout must be greater than 0", str(context.exception))

    @patch("dbfetch.requests.Session")
    def test_default_session(self, mock_session):
        fetcher = DBFetch(url="http://localhost/dbfetch", timeout=5)

        self.assertEqual(fetcher.session, mock_session.return_value)
        self.assertEqual(fetcher.url, "http://localhost/dbfetch")


class TestUniprotAccessions(unittest.TestCase):
    def test_dbref(self):
        pdb_text = "\n".join(
            [
                "HEADER    OXIDOREDUCTASE                          01-JAN-00   1ABC",
                dbref_line("A", "UNP", "P69905", "HBA_HUMAN"),
                dbref_line("B", "UNP", "P68871", "HBB_HUMAN"),
                dbref_line("C", "UNP", "P69905", "HBA_HUMAN"),
                dbref_line("D", "GB", "12345678", "AAA00000"),
                seqres_line("A"),
                seqres_line("B"),
                seqres_line("C"),
                seqres_line("D"),
                "ATOM      1  N   VAL A   1      10.000  10.000  10.000  1.00 20.00           N",
                "END",
            ]
        )

        # entry names such as HBA_HUMAN are not accessions
        self.assertEqual(uniprot_accessions(pdb_text), ["P69905", "P68871"])

    def test_dbref1_and_dbref2(self):
        pdb_text = "\n".join(
            [
                "DBREF1 1ABC A    1   120  UNP                  A0A0B4J2F0_HUMAN",
                "DBREF2 1ABC A     A0A0B4J2F0                         1         120",
                "DBREF1 1ABC B    1   120  GB                   XYZ",
                "DBREF2 1ABC B     NC_000001                          1         120",
            ]
        )

        self.assertEqual(uniprot_accessions(pdb_text), ["A0A0B4J2F0"])

    def test_no_references(self):
        self.assertEqual(uniprot_accessions("HEADER    NOTHING\nEND\n"), [])


class TestCellularComponentGOIds(unittest.TestCase):
    def test_cellular_component_only(self):
        self.assertEqual(
            cellular_component_go_ids(UNIPROT_ENTRY), ["GO:0005743", "GO:0005759"]
        )

    def test_pdb_cellular_component_go_ids(self):
        pdb_text = "\n".join(
            [
                dbref_line("A", "UNP", "O43615", "TIM44_HUMAN"),
                dbref_line("B", "UNP", "O43615", "TIM44_HUMAN"),
                seqres_line("A"),
                seqres_line("B"),
                "END",
            ]
        )
        entries = {("pdb", "1abc"): pdb_text, ("uniprotkb", "O43615"): UNIPROT_ENTRY}

        fetcher = MagicMock(spec=DBFetch)
        fetcher.fetch.side_effect = lambda db, entry_id: entries[(db, entry_id)]

        self.assertEqual(
            pdb_cellular_component_go_ids(fetcher, "1abc"), ["GO:0005743", "GO:0005759"]
        )
        self.assertEqual(fetcher.fetch.call_count, 2)


if __name__ == "__main__":
    unittest.main()
