"""
Tests for the grosses cleaning pipeline.

Tests verify that:
1. Every cleaned row is from 2010 on and complete
2. The holiday flag marks exactly December and January
3. Out-of-scope columns are dropped and theatre becomes a fixed category set
"""

import numpy as np
import pandas as pd
import pytest

from config.validation import OUT_OF_SCOPE_COLUMNS, SchemaMismatchError
from data.cleaning import (
    TheatreDomain,
    add_date_parts,
    add_holiday_flag,
    clean_grosses,
    theatre_domain,
)


@pytest.fixture
def mixed_raw(make_raw):
    """Rows across years and theatres, some incomplete."""
    return make_raw([
        {"week_ending": "2008-05-04", "show": "Rent", "theatre": "Nederlander"},
        {"week_ending": "2010-01-03", "show": "Wicked", "theatre": "Gershwin"},
        {"week_ending": "2012-12-30", "show": "Wicked", "theatre": "Gershwin"},
        {"week_ending": "2014-06-01", "show": "Matilda", "theatre": "Shubert", "pct_capacity": None},
        {"week_ending": "2016-08-07", "show": "Hamilton", "theatre": "Richard Rodgers"},
        {"week_ending": "2019-02-03", "show": "Hamilton", "theatre": "Richard Rodgers", "weekly_gross": np.nan},
        {"week_ending": "2019-11-24", "show": "Hadestown", "theatre": "Walter Kerr"},
    ])


class TestCleaningPostconditions:

    def test_year_floor_and_no_nulls(self, mixed_raw):
        cleaned = clean_grosses(mixed_raw)

        assert (cleaned["year"] >= 2010).all()
        assert not cleaned.isna().any().any()
        assert len(cleaned) == 4

    def test_out_of_scope_columns_dropped(self, mixed_raw):
        cleaned = clean_grosses(mixed_raw)
        for col in OUT_OF_SCOPE_COLUMNS:
            assert col not in cleaned.columns
        for col in ["week_ending", "show", "theatre", "weekly_gross", "avg_ticket_price",
                    "pct_capacity", "weekly_gross_overall", "year", "month", "holiday"]:
            assert col in cleaned.columns

    def test_regression_variant_drops_show(self, mixed_raw):
        cleaned = clean_grosses(mixed_raw, drop_show=True)
        assert "show" not in cleaned.columns
        assert len(cleaned) == 4

    def test_null_in_dropped_column_does_not_drop_row(self, make_raw):
        raw = make_raw([{"week_ending": "2015-05-03", "top_ticket_price": None, "previews": None}])
        assert len(clean_grosses(raw)) == 1

    def test_date_parts_are_integers(self, mixed_raw):
        cleaned = clean_grosses(mixed_raw)
        assert pd.api.types.is_integer_dtype(cleaned["year"])
        assert pd.api.types.is_integer_dtype(cleaned["month"])
        assert pd.api.types.is_datetime64_any_dtype(cleaned["week_ending"])

    def test_unparseable_date_dropped(self, make_raw):
        raw = make_raw([{"week_ending": "not a date"}, {"week_ending": "2015-05-03"}])
        cleaned = clean_grosses(raw)
        assert len(cleaned) == 1

    def test_custom_min_year(self, mixed_raw):
        cleaned = clean_grosses(mixed_raw, min_year=2016)
        assert sorted(cleaned["year"].tolist()) == [2016, 2019]

    def test_input_not_mutated(self, mixed_raw):
        before = mixed_raw.copy()
        clean_grosses(mixed_raw)
        pd.testing.assert_frame_equal(mixed_raw, before)

    def test_deterministic(self, mixed_raw):
        pd.testing.assert_frame_equal(clean_grosses(mixed_raw), clean_grosses(mixed_raw))


class TestHolidayFlag:

    @pytest.mark.parametrize("month", range(1, 13))
    def test_flag_true_only_for_december_and_january(self, make_raw, month):
        raw = make_raw([{"week_ending": f"2015-{month:02d}-10"}])
        cleaned = clean_grosses(raw)
        assert bool(cleaned["holiday"].iloc[0]) == (month in (12, 1))

    def test_flag_is_boolean(self, make_raw):
        raw = make_raw([{"week_ending": "2015-12-27"}, {"week_ending": "2015-07-05"}])
        flagged = add_holiday_flag(add_date_parts(raw))
        assert flagged["holiday"].dtype == bool
        assert flagged["holiday"].tolist() == [True, False]


class TestTheatreDomain:

    def test_theatre_is_sorted_category(self, mixed_raw):
        cleaned = clean_grosses(mixed_raw)
        assert isinstance(cleaned["theatre"].dtype, pd.CategoricalDtype)
        assert list(cleaned["theatre"].cat.categories) == ["Gershwin", "Richard Rodgers", "Walter Kerr"]

    def test_domain_computed_after_filtering(self, mixed_raw):
        domain = theatre_domain(clean_grosses(mixed_raw))
        # Nederlander only appears in 2008 and Shubert only in an incomplete row
        assert "Nederlander" not in domain
        assert "Shubert" not in domain
        assert domain.first == "Gershwin"
        assert len(domain) == 3

    def test_domain_from_plain_strings(self):
        df = pd.DataFrame({"theatre": ["Imperial", "Broadhurst", "Imperial"]})
        assert theatre_domain(df).values == ("Broadhurst", "Imperial")

    def test_empty_domain_has_no_first(self):
        with pytest.raises(ValueError):
            TheatreDomain(()).first


class TestSchema:

    def test_missing_retained_column_raises(self, mixed_raw):
        with pytest.raises(SchemaMismatchError, match="avg_ticket_price"):
            clean_grosses(mixed_raw.drop(columns=["avg_ticket_price"]))


class TestScenarios:

    def test_years_before_min_year_removed(self, make_raw):
        raw = make_raw([
            {"week_ending": "2009-06-07", "show": "X"},
            {"week_ending": "2010-06-06", "show": "X"},
            {"week_ending": "2011-06-05", "show": "X"},
        ])
        cleaned = clean_grosses(raw, min_year=2010)
        assert len(cleaned) == 2
        assert cleaned["year"].tolist() == [2010, 2011]

    def test_null_ticket_price_row_dropped(self, make_raw):
        raw = make_raw([
            {"week_ending": "2015-03-01", "show": "X"},
            {"week_ending": "2015-03-08", "show": "X", "avg_ticket_price": None},
        ])
        cleaned = clean_grosses(raw)
        assert len(cleaned) == 1
        assert cleaned["week_ending"].iloc[0] == pd.Timestamp("2015-03-01")
