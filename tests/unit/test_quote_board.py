"""
Unit tests for QuoteBoard (order-table ticker).
"""

import random
import re

from stocksim.app.services.quote_board import NAME_PREFIXES, NAME_SUFFIXES, QuoteBoard
from stocksim.domain.entities.stock_quote import format_change

SYMBOL_RE = re.compile(r"^[A-Z]{3}\.X\d{4}$")
CHANGE_RE = re.compile(r"^[+-]\d+\.\d{2}%$")


class TestInitialize:

    def test_table_size_and_symbol_format(self, market_config, rng):
        board = QuoteBoard(market_config, rng)
        board.initialize()

        assert len(board) == market_config.total_symbols
        for index, quote in enumerate(board.quotes):
            assert SYMBOL_RE.match(quote.symbol_name)
            assert quote.symbol_name.endswith(f".X{index:04d}")

    def test_company_names(self, market_config, rng):
        board = QuoteBoard(market_config, rng)
        board.initialize()

        for quote in board.quotes:
            prefix, suffix = quote.name.split(" ")
            assert prefix in NAME_PREFIXES
            assert suffix in NAME_SUFFIXES

    def test_prices_and_spread(self, market_config, rng):
        board = QuoteBoard(market_config, rng)
        board.initialize()

        for quote in board.quotes:
            assert 1.0 <= quote.buy_value <= 1000.0
            assert quote.sell_value < quote.buy_value
            spread = 1 - quote.sell_value / quote.buy_value
            assert 0.009 <= spread <= 0.051
            assert quote.buy_change == quote.sell_change == "+0.00%"

    def test_wire_shape(self, market_config, rng):
        board = QuoteBoard(market_config, rng)
        board.initialize()

        row = board.to_list()[0]
        assert set(row) == {
            "symbol_name", "buy_value", "name", "buy_change", "sell_value", "sell_change",
        }


class TestUpdate:

    def test_updates_only_a_random_subset(self, market_config, rng):
        board = QuoteBoard(market_config, rng)
        board.initialize()
        before = board.to_list()

        touched = board.update_random()
        after = board.to_list()

        assert len(touched) == market_config.stocks_per_update
        assert len(set(touched)) == len(touched)
        for index, (old, new) in enumerate(zip(before, after)):
            if index not in touched:
                assert old == new
        assert board.update_cycles == 1

    def test_change_strings_and_bounds(self, market_config, rng):
        board = QuoteBoard(market_config, rng)
        board.initialize()

        for _ in range(50):
            before = {q.symbol_name: q.buy_value for q in board.quotes}
            for index in board.update_random():
                quote = board.quotes[index]
                assert CHANGE_RE.match(quote.buy_change)
                assert CHANGE_RE.match(quote.sell_change)
                ratio = quote.buy_value / before[quote.symbol_name]
                assert 0.94 <= ratio <= 1.06
                assert quote.buy_value >= 0.001

    def test_subset_capped_by_table_size(self, rng):
        from stocksim.domain.value_objects.market_config import MarketConfig

        config = MarketConfig(total_symbols=3, stocks_per_update=15)
        board = QuoteBoard(config, rng)
        board.initialize()

        assert sorted(board.update_random()) == [0, 1, 2]

    def test_reproducible_with_seed(self, market_config):
        def run():
            board = QuoteBoard(market_config, random.Random(77))
            board.initialize()
            for _ in range(10):
                board.update_random()
            return board.to_list()

        assert run() == run()


class TestFormatChange:

    def test_positive(self):
        assert format_change(100.0, 101.0) == "+1.00%"

    def test_negative(self):
        assert format_change(100.0, 99.5) == "-0.50%"

    def test_unchanged(self):
        assert format_change(100.0, 100.0) == "+0.00%"
