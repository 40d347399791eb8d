from __future__ import annotations

import unittest

import numpy as np
import pandas as pd

from eustat.errors import ValidationError
from eustat.parse.bulk import RawDataset, read_bulk_tsv
from eustat.parse.tidy import apply_column_types, dimension_names_for, parse_values, tidy_dataset
from tests.helpers import BUS_HEADER, bus_share_payload, make_bulk_tsv, mixed_frequency_payload


class BulkReaderTests(unittest.TestCase):
    def test_reads_dimensions_and_strips_labels(self) -> None:
        raw = read_bulk_tsv(bus_share_payload())

        self.assertEqual(raw.key_column, BUS_HEADER)
        self.assertEqual(raw.dimensions, ["unit", "vehicle", "geo"])
        self.assertEqual(raw.period_columns, ["1990", "1991", "1992"])
        self.assertEqual(raw.frame.iloc[0].tolist(), ["PC,BUS_TOT,AT", ":", ":", "9.9"])

    def test_reads_gzip_payload(self) -> None:
        raw = read_bulk_tsv(bus_share_payload(compress=True))

        self.assertEqual(raw.period_columns, ["1990", "1991", "1992"])
        self.assertEqual(len(raw.frame), 1)

    def test_reads_api_header(self) -> None:
        payload = make_bulk_tsv("freq,unit,geo\\TIME_PERIOD", ["2015-Q1"], [("Q,PC,AT", ["1.5"])])

        raw = read_bulk_tsv(payload)

        self.assertEqual(raw.dimensions, ["freq", "unit", "geo"])
        self.assertEqual(raw.period_columns, ["2015-Q1"])

    def test_empty_payload_raises(self) -> None:
        with self.assertRaises(ValidationError):
            read_bulk_tsv(b"")


class TidyDatasetTests(unittest.TestCase):
    def test_bus_share_scenario(self) -> None:
        payload = make_bulk_tsv(BUS_HEADER, ["1990", "1991", "1992"], [("PC,BUS_TOT,AT", ["NA", "NA", "9.9"])])

        tidy = tidy_dataset(read_bulk_tsv(payload), time_format="raw", typed_columns=False)

        self.assertEqual(tidy.columns.tolist(), ["unit", "vehicle", "geo", "time", "values"])
        self.assertEqual(len(tidy), 3)
        self.assertEqual(tidy["unit"].tolist(), ["PC", "PC", "PC"])
        self.assertEqual(tidy["vehicle"].tolist(), ["BUS_TOT"] * 3)
        self.assertEqual(tidy["geo"].tolist(), ["AT"] * 3)
        self.assertEqual(tidy["time"].tolist(), ["1990", "1991", "1992"])
        self.assertTrue(np.isnan(tidy["values"].iloc[0]))
        self.assertTrue(np.isnan(tidy["values"].iloc[1]))
        self.assertAlmostEqual(tidy["values"].iloc[2], 9.9)

    def test_default_date_format(self) -> None:
        tidy = tidy_dataset(read_bulk_tsv(bus_share_payload()))

        self.assertEqual(tidy["time"].dtype, "datetime64[ns]")
        self.assertEqual(tidy["time"].iloc[2], pd.Timestamp("1992-01-01"))
        self.assertEqual(tidy["values"].dtype, "float64")
        self.assertEqual(tidy["values"].isna().tolist(), [True, True, False])

    def test_date_last_and_num_formats(self) -> None:
        raw = read_bulk_tsv(bus_share_payload())

        last = tidy_dataset(raw, time_format="date_last")
        num = tidy_dataset(raw, time_format="num")

        self.assertEqual(last["time"].iloc[0], pd.Timestamp("1990-12-31"))
        self.assertEqual(num["time"].tolist(), [1990.0, 1991.0, 1992.0])

    def test_rows_follow_period_then_source_order(self) -> None:
        raw = read_bulk_tsv(mixed_frequency_payload())

        tidy = tidy_dataset(raw, time_format="raw", typed_columns=False)

        self.assertEqual(
            tidy["time"].tolist(),
            ["2015", "2015", "2015Q2", "2015Q2", "2015Q1", "2015Q1", "2014", "2014"],
        )
        self.assertEqual(tidy["geo"].tolist()[:2], ["AT", "BE"])

    def test_flags_are_stripped_and_missing_kept(self) -> None:
        raw = read_bulk_tsv(mixed_frequency_payload())

        tidy = tidy_dataset(raw, time_format="raw", typed_columns=False)
        be = tidy[tidy["geo"] == "BE"].set_index("time")["values"]

        self.assertTrue(np.isnan(be["2015"]))
        self.assertAlmostEqual(be["2015Q2"], 6.5)
        self.assertTrue(np.isnan(be["2015Q1"]))
        self.assertAlmostEqual(be["2014"], 8.0)

    def test_select_time_filters_before_conversion(self) -> None:
        raw = read_bulk_tsv(mixed_frequency_payload())

        quarterly = tidy_dataset(raw, time_format="date", select_time="Q")

        self.assertEqual(len(quarterly), 4)
        self.assertEqual(
            sorted(quarterly["time"].drop_duplicates().tolist()),
            [pd.Timestamp("2015-01-01"), pd.Timestamp("2015-04-01")],
        )
        at_q2 = quarterly[(quarterly["geo"] == "AT") & (quarterly["time"] == pd.Timestamp("2015-04-01"))]
        self.assertAlmostEqual(at_q2["values"].iloc[0], 2.0)

    def test_mixed_frequencies_require_selection(self) -> None:
        raw = read_bulk_tsv(mixed_frequency_payload())

        for time_format in ["date", "date_last", "num"]:
            with self.subTest(time_format=time_format):
                with self.assertRaises(ValidationError):
                    tidy_dataset(raw, time_format=time_format)

        self.assertEqual(len(tidy_dataset(raw, time_format="raw")), 8)

    def test_select_time_missing_frequency_raises(self) -> None:
        raw = read_bulk_tsv(mixed_frequency_payload())

        with self.assertRaises(ValidationError):
            tidy_dataset(raw, select_time="M")

    def test_invalid_arguments_raise(self) -> None:
        raw = read_bulk_tsv(bus_share_payload())

        with self.assertRaises(ValidationError):
            tidy_dataset(raw, time_format="epoch")
        with self.assertRaises(ValidationError):
            tidy_dataset(raw, select_time="W")

    def test_unparsable_period_label_raises_outside_raw(self) -> None:
        payload = make_bulk_tsv("unit,geo\\time", ["2015W01"], [("PC,AT", ["1.0"])])
        raw = read_bulk_tsv(payload)

        with self.assertRaises(ValidationError):
            tidy_dataset(raw)
        self.assertEqual(tidy_dataset(raw, time_format="raw")["time"].tolist(), ["2015W01"])

    def test_empty_dataset_keeps_headers(self) -> None:
        payload = make_bulk_tsv(BUS_HEADER, ["1990", "1991"], [])

        tidy = tidy_dataset(read_bulk_tsv(payload))

        self.assertTrue(tidy.empty)
        self.assertEqual(tidy.columns.tolist(), ["unit", "vehicle", "geo", "time", "values"])
        self.assertEqual(tidy["time"].dtype, "datetime64[ns]")
        self.assertEqual(tidy["values"].dtype, "float64")

    def test_unknown_dimension_labels_fall_back_to_position(self) -> None:
        payload = make_bulk_tsv("unit\\time", ["2015"], [("PC,AT", ["1.0"])])

        tidy = tidy_dataset(read_bulk_tsv(payload), typed_columns=False)

        self.assertEqual(tidy.columns.tolist(), ["unit", "dim_2", "time", "values"])
        self.assertEqual(tidy["dim_2"].tolist(), ["AT"])

    def test_typed_columns_preserve_source_order(self) -> None:
        payload = make_bulk_tsv(
            "unit,geo\\time",
            ["2015", "2014"],
            [("PC,SE", ["1", "2"]), ("PC,AT", ["3", "4"]), ("PC,BE", ["5", "6"])],
        )

        tidy = tidy_dataset(read_bulk_tsv(payload), time_format="raw")

        self.assertIsInstance(tidy["geo"].dtype, pd.CategoricalDtype)
        self.assertEqual(tidy["geo"].cat.categories.tolist(), ["SE", "AT", "BE"])
        self.assertEqual(tidy["time"].cat.categories.tolist(), ["2015", "2014"])
        self.assertFalse(isinstance(tidy["values"].dtype, pd.CategoricalDtype))


class HelperTests(unittest.TestCase):
    def test_parse_values(self) -> None:
        parsed = parse_values(pd.Series(["1.5", "2 e", ":", ": c", "", "-0.3 p", "NA"]))

        self.assertEqual(parsed.isna().tolist(), [False, False, True, True, True, False, True])
        self.assertAlmostEqual(parsed[5], -0.3)

    def test_dimension_names_for(self) -> None:
        self.assertEqual(
            dimension_names_for(["unit", "", "time", "unit"], 5),
            ["unit", "dim_2", "dim_3", "dim_4", "dim_5"],
        )
        self.assertEqual(dimension_names_for(["dim_2"], 2), ["dim_2", "dim_3"])
        self.assertEqual(dimension_names_for(["", "dim_1"], 2), ["dim_2", "dim_1"])

    def test_positional_names_do_not_clash_with_header(self) -> None:
        raw = read_bulk_tsv(make_bulk_tsv("dim_2\\time", ["2015"], [("AT,PC", ["1.0"])]))

        tidy = tidy_dataset(raw, time_format="raw", typed_columns=False)

        self.assertEqual(list(tidy.columns), ["dim_2", "dim_3", "time", "values"])
        self.assertEqual(tidy.iloc[0][["dim_2", "dim_3"]].tolist(), ["AT", "PC"])

    def test_apply_column_types_untyped_is_identity(self) -> None:
        frame = pd.DataFrame({"geo": ["AT"], "time": [2015.0], "values": [1.0]})

        self.assertIs(apply_column_types(frame, typed=False), frame)

    def test_raw_dataset_from_frame(self) -> None:
        frame = pd.DataFrame({"a,b\\time": ["x,y"], "2015": ["1"]})

        raw = RawDataset.from_frame(frame)

        self.assertEqual(raw.dimensions, ["a", "b"])
        self.assertEqual(raw.period_columns, ["2015"])


if __name__ == "__main__":
    unittest.main()
