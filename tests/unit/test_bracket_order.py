"""Tests for bracket order legs and primary stop-loss synchronisation."""

import pytest

from tradebook.core.enums import Direction
from tradebook.core.errors import LegConstraintError, MissingPriceError
from tradebook.core.models import BracketOrder, Trade


class TestPositionSize:
    def test_sum_of_legs(self, make_order):
        order = make_order(legs=[(3.0, 110.0), (2.5, 115.0)])
        assert order.position_size == 5.5

    def test_tracks_leg_edits(self, make_order):
        order = make_order(legs=[(3.0, 110.0), (2.0, 115.0)])
        order.update_leg("leg-2", size=7.0)
        assert order.position_size == 10.0
        order.add_leg(size=1.0, take_profit_price=120.0)
        assert order.position_size == 11.0
        order.remove_leg("leg-1")
        assert order.position_size == 8.0

    def test_serialised(self, make_order):
        dumped = make_order(legs=[(1.0, 110.0), (2.0, 111.0)]).model_dump()
        assert dumped["position_size"] == 3.0

    def test_empty_order(self):
        assert BracketOrder().position_size == 0


class TestLegs:
    def test_new_leg_follows_primary(self, make_order):
        order = make_order(stop=94.0)
        leg = order.add_leg(size=1.0)
        assert leg.stop_loss_price == 94.0
        assert leg.sl_modified_by_user is False

    def test_cannot_remove_last_leg(self, make_order):
        order = make_order()
        with pytest.raises(LegConstraintError, match="at least one leg"):
            order.remove_leg("leg-1")

    def test_unknown_leg(self, make_order):
        with pytest.raises(LegConstraintError):
            make_order().get_leg("nope")

    def test_leg_number(self, make_order):
        order = make_order(legs=[(1.0, 110.0), (1.0, 112.0)])
        assert order.leg_number("leg-2") == 2


class TestPrimaryStopSync:
    def test_unmodified_legs_follow(self, make_order):
        order = make_order(legs=[(1.0, 110.0), (1.0, 112.0)])
        synced = order.set_primary_stop_loss(93.0)
        assert synced == ["leg-1", "leg-2"]
        assert all(leg.stop_loss_price == 93.0 for leg in order.bracket_groups)

    def test_user_edited_leg_is_detached(self, make_order):
        order = make_order(legs=[(1.0, 110.0), (1.0, 112.0)])
        order.update_leg("leg-2", stop_loss_price=97.0)
        assert order.get_leg("leg-2").sl_modified_by_user is True

        synced = order.set_primary_stop_loss(92.0)
        assert synced == ["leg-1"]
        assert order.get_leg("leg-1").stop_loss_price == 92.0
        assert order.get_leg("leg-2").stop_loss_price == 97.0

    def test_flag_is_one_way(self, make_order):
        order = make_order()
        order.update_leg("leg-1", stop_loss_price=96.0)
        order.update_leg("leg-1", stop_loss_price=95.0)  # back to primary
        order.set_primary_stop_loss(90.0)
        assert order.get_leg("leg-1").sl_modified_by_user is True
        assert order.get_leg("leg-1").stop_loss_price == 95.0

    def test_editing_other_fields_keeps_flag(self, make_order):
        order = make_order()
        order.update_leg("leg-1", size=4.0, take_profit_price=115.0)
        assert order.get_leg("leg-1").sl_modified_by_user is False

    def test_trade_skips_invalid_stop(self, make_trade):
        trade = make_trade()
        # Above entry on a long: primary updates, legs stay put
        assert trade.update_primary_stop_loss(101.0) == []
        assert trade.bracket_order.primary_stop_loss == 101.0
        assert trade.bracket_order.get_leg("leg-1").stop_loss_price == 95.0

    def test_trade_skips_zero_stop(self, make_trade):
        trade = make_trade()
        assert trade.update_primary_stop_loss(0.0) == []
        assert trade.bracket_order.get_leg("leg-1").stop_loss_price == 95.0

    def test_completed_trade_legs_never_move(self, make_trade):
        trade = make_trade().model_copy(update={"is_completed": True})
        assert trade.update_primary_stop_loss(90.0) == []
        assert trade.bracket_order.get_leg("leg-1").stop_loss_price == 95.0

    def test_flag_survives_serialisation(self, make_trade):
        trade = make_trade()
        trade.bracket_order.update_leg("leg-1", stop_loss_price=96.0)
        restored = Trade.model_validate(trade.to_record())
        assert restored.bracket_order.get_leg("leg-1").sl_modified_by_user is True


class TestValidateLegs:
    def test_valid_order(self, make_order):
        assert make_order().validate_legs(Direction.LONG) == []

    def test_zero_size_and_missing_tp(self, make_order):
        order = make_order(legs=[(0.0, 0.0)])
        messages = [i.message for i in order.validate_legs(Direction.LONG)]
        assert "Total position size cannot be zero" in messages
        assert "Bracket 1: Size cannot be zero" in messages
        assert "Bracket 1: Take profit price cannot be zero" in messages

    def test_take_profit_wrong_side(self, make_order):
        order = make_order(legs=[(1.0, 110.0), (1.0, 90.0)])
        issues = order.validate_legs(Direction.LONG)
        assert len(issues) == 1
        assert issues[0].leg_id == "leg-2"
        assert issues[0].message.startswith("Bracket 2:")

    def test_missing_leg_stop(self, make_order):
        order = make_order()
        order.update_leg("leg-1", stop_loss_price=0.0)
        issues = order.validate_legs(Direction.LONG)
        assert isinstance(issues[0], MissingPriceError)

    def test_short_order(self, make_order):
        order = make_order(entry=50.0, stop=55.0, legs=[(4.0, 45.0)])
        assert order.validate_legs(Direction.SHORT) == []
        assert order.validate_legs(Direction.LONG) != []

    def test_no_legs(self):
        issues = BracketOrder().validate_legs(Direction.LONG)
        assert issues[0].message == "Please add at least one bracket"
