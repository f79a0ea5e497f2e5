import unittest
from dataclasses import replace

from coinscope.data.models import AssetDetail, CurrencyRate, Detail, History, Snapshot
from coinscope.display.format import change_label, round_values, sort_rows
from coinscope.display.state import CoinPageState, Currency

EURO = CurrencyRate(id="euro", symbol="EUR", currency_symbol="€", type="fiat", rate_usd="1.0800000000")
BITCOIN = CurrencyRate(id="bitcoin", symbol="BTC", currency_symbol="₿", type="crypto", rate_usd="64000")


def make_asset(**overrides: str) -> AssetDetail:
    fields = {
        "id": "bitcoin",
        "name": "Bitcoin",
        "symbol": "BTC",
        "rank": "1",
        "supply": "19000000",
        "max_supply": "21000000",
        "market_cap_usd": "1000",
        "volume_usd_24hr": "500",
        "price_usd": "64000",
        "change_percent_24hr": "-3.25",
        "vwap_24hr": "63000",
        "explorer": "https://blockchain.info/",
    }
    fields.update(overrides)
    return AssetDetail(**fields)


class FormatTest(unittest.TestCase):
    def test_round_values_shares_one_unit(self) -> None:
        self.assertEqual(([19.0, 21.0], "M"), round_values(19_000_000, 21_000_000))
        self.assertEqual(([999.0], ""), round_values(999))

    def test_change_label_arrows(self) -> None:
        self.assertEqual("▼ 3.25", change_label(-3.25))
        self.assertEqual("▲ 3.25", change_label(3.25))
        self.assertEqual("▲ 0.00", change_label(0.0))

    def test_sort_rows_numeric_columns(self) -> None:
        rows = [["ETH", "3000.00"], ["BTC", "64000.00"], ["DOGE", "0.10"]]

        self.assertEqual(["DOGE", "ETH", "BTC"], [row[0] for row in sort_rows(rows, 1, True)])
        self.assertEqual(["ETH", "DOGE", "BTC"], [row[0] for row in sort_rows(rows, 0, False)])


class ApplyDetailTest(unittest.TestCase):
    def setUp(self) -> None:
        self.state = CoinPageState("bitcoin")

    def test_volume_gauge_and_change(self) -> None:
        self.state.apply_detail(Detail(make_asset(volume_usd_24hr="500", market_cap_usd="1000")))

        self.assertEqual(50, self.state.volume_percent)
        self.assertEqual("▼ 3.25", self.state.change_label)

    def test_zero_market_cap_leaves_gauge_untouched(self) -> None:
        self.state.apply_detail(Detail(make_asset(volume_usd_24hr="500", market_cap_usd="1000")))
        self.state.apply_detail(Detail(make_asset(volume_usd_24hr="500", market_cap_usd="0")))

        self.assertEqual(50, self.state.volume_percent)

    def test_out_of_range_ratio_is_ignored(self) -> None:
        self.state.apply_detail(Detail(make_asset(volume_usd_24hr="5000", market_cap_usd="1000")))

        self.assertEqual(0, self.state.volume_percent)

    def test_positive_and_unparsable_change(self) -> None:
        self.state.apply_detail(Detail(make_asset(change_percent_24hr="3.25")))
        self.assertEqual("▲ 3.25", self.state.change_label)

        self.state.apply_detail(Detail(make_asset(change_percent_24hr="")))
        self.assertEqual("NA", self.state.change_label)

    def test_market_cap_and_supply_formatting(self) -> None:
        self.state.apply_detail(Detail(make_asset(market_cap_usd="1000000")))

        self.assertIn(["Market Cap", "1.00 M USD $"], self.state.details.rows)
        self.assertEqual([19.0, 21.0], self.state.supply_values)
        self.assertEqual(" Supply (M) ", self.state.supply_title)
        self.assertEqual("64000.00 USD $", self.state.chart_labels["Value"])
        self.assertEqual(["Name", "Bitcoin"], self.state.details.header)

    def test_missing_max_supply_keeps_previous_supply(self) -> None:
        self.state.apply_detail(Detail(make_asset()))
        self.state.apply_detail(Detail(make_asset(max_supply="")))

        self.assertEqual([19.0, 21.0], self.state.supply_values)

    def test_unparsable_field_keeps_previous_value(self) -> None:
        self.state.apply_detail(Detail(make_asset(market_cap_usd="1000000", vwap_24hr="63000")))
        self.state.apply_detail(Detail(make_asset(market_cap_usd="", vwap_24hr="n/a")))

        self.assertIn(["Market Cap", "1.00 M USD $"], self.state.details.rows)
        self.assertIn(["VWAP 24Hr", "63000.00 USD $"], self.state.details.rows)

    def test_reapplying_same_detail_is_idempotent(self) -> None:
        detail = Detail(make_asset())
        self.state.apply_detail(detail)
        first = (
            list(self.state.details.rows), dict(self.state.chart_labels), self.state.volume_percent,
            list(self.state.supply_values), self.state.supply_title, self.state.change_label,
        )
        self.state.apply_detail(detail)
        second = (
            list(self.state.details.rows), dict(self.state.chart_labels), self.state.volume_percent,
            list(self.state.supply_values), self.state.supply_title, self.state.change_label,
        )

        self.assertEqual(first, second)


class ApplyHistoryAndSnapshotTest(unittest.TestCase):
    def test_history_labels_use_raw_extremes(self) -> None:
        state = CoinPageState("bitcoin")
        state.apply_history(History.from_series([3.0, 1.5, 2.0, 4.25]))

        self.assertEqual("4.25 USD $", state.chart_labels["Max"])
        self.assertEqual("1.50 USD $", state.chart_labels["Min"])
        self.assertEqual([1.5, 0.0, 0.5, 2.75], state.chart_series)

    def test_snapshot_rows_sorted_by_symbol(self) -> None:
        state = CoinPageState("bitcoin")
        state.apply_snapshot(Snapshot({"ETH": 3000.0, "BTC": 64000.0}))

        self.assertEqual([["BTC", "64000.00"], ["ETH", "3000.00"]], state.favourites.rows)
        self.assertEqual(["Symbol", "Price (USD $)"], state.favourites.header)

    def test_active_sort_survives_new_snapshot(self) -> None:
        state = CoinPageState("bitcoin")
        state.sort_favourites(1, ascending=False)
        state.apply_snapshot(Snapshot({"ETH": 3000.0, "BTC": 64000.0, "DOGE": 0.1}))

        self.assertEqual(["BTC", "ETH", "DOGE"], [row[0] for row in state.favourites.rows])
        self.assertEqual("Price (USD $) ▼", state.favourites.header[1])

    def test_live_price_uses_active_currency(self) -> None:
        state = CoinPageState("bitcoin", currency=Currency("EUR €", 2.0))

        self.assertTrue(state.apply_price("100"))
        self.assertEqual("50.00 EUR €", state.price_label)
        self.assertFalse(state.apply_price("garbage"))
        self.assertEqual("50.00 EUR €", state.price_label)


class CurrencyPickerTest(unittest.TestCase):
    def test_fiat_only_unless_crypto_requested(self) -> None:
        state = CoinPageState("bitcoin", rates=[EURO, BITCOIN])

        state.open_currency_picker()
        self.assertEqual(["EUR"], [row[0] for row in state.currency_picker.rows])
        state.open_currency_picker(include_crypto=True)
        self.assertEqual(["BTC", "EUR"], [row[0] for row in state.currency_picker.rows])
        self.assertTrue(state.overlay)

    def test_commit_adopts_selected_rate(self) -> None:
        state = CoinPageState("bitcoin", rates=[EURO])
        state.open_currency_picker()

        self.assertTrue(state.commit_currency())
        self.assertFalse(state.overlay)
        self.assertEqual("EUR €", state.currency.label)
        self.assertAlmostEqual(1.08, state.currency.factor)

    def test_malformed_rate_keeps_current_currency(self) -> None:
        state = CoinPageState("bitcoin", rates=[replace(EURO, rate_usd=""), replace(BITCOIN, rate_usd="0")])

        state.open_currency_picker(include_crypto=True)
        with self.assertLogs("coinscope.display.state", level="WARNING"):
            self.assertFalse(state.commit_currency())
        self.assertEqual(Currency(), state.currency)


class IntervalStepTest(unittest.TestCase):
    def test_step_wraps_around(self) -> None:
        state = CoinPageState("bitcoin", interval="1 day")

        self.assertEqual("1 min", state.step_interval(1))
        self.assertEqual("1 day", state.step_interval(-1))
        self.assertEqual("12 hours", state.step_interval(-1))


if __name__ == "__main__":
    unittest.main()
