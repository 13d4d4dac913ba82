"""Tests for the FIFO lot queue."""

from datetime import date

from tradelog_app.matching.lot_queue import LotFragment, LotQueue


def _fragment(quantity, price=100.0, day=1, source_id=None):
    return LotFragment(price=price, quantity=quantity, date=date(2025, 1, day), source_id=source_id)


class TestLotQueue:
    """Test LotQueue consumption semantics."""

    def test_empty_queue(self):
        queue = LotQueue()
        matched, remaining = queue.consume(10)
        assert matched == []
        assert remaining == 10
        assert len(queue) == 0
        assert not queue

    def test_full_consumption_removes_fragment(self):
        queue = LotQueue()
        queue.push(_fragment(10, source_id=1))

        matched, remaining = queue.consume(10)

        assert [f.source_id for f in matched] == [1]
        assert remaining == 0
        assert len(queue) == 0

    def test_split_leaves_residual(self):
        queue = LotQueue()
        queue.push(_fragment(100, price=50.0, source_id=7))

        matched, remaining = queue.consume(60)

        assert remaining == 0
        assert len(matched) == 1
        assert matched[0].quantity == 60
        assert matched[0].price == 50.0
        assert matched[0].source_id == 7
        assert len(queue) == 1
        assert queue.open_quantity == 40

    def test_oldest_first(self):
        queue = LotQueue()
        queue.push(_fragment(5, day=1, source_id=1))
        queue.push(_fragment(5, day=2, source_id=2))
        queue.push(_fragment(5, day=3, source_id=3))

        matched, remaining = queue.consume(7)

        assert [(f.source_id, f.quantity) for f in matched] == [(1, 5), (2, 2)]
        assert remaining == 0
        assert [(f.source_id, f.quantity) for f in queue] == [(2, 3), (3, 5)]

    def test_over_consumption_returns_remainder(self):
        queue = LotQueue()
        queue.push(_fragment(3))
        queue.push(_fragment(4))

        matched, remaining = queue.consume(10)

        assert sum(f.quantity for f in matched) == 7
        assert remaining == 3
        assert len(queue) == 0

    def test_residual_never_negative(self):
        queue = LotQueue()
        queue.push(_fragment(10))
        for _ in range(5):
            queue.consume(3)
            assert all(f.quantity > 0 for f in queue)
        assert queue.open_quantity == 0

    def test_fragment_cost(self):
        assert _fragment(4, price=2.5).cost == 10.0

    def test_fractional_quantities_leave_no_residue(self):
        queue = LotQueue()
        queue.push(_fragment(0.1, source_id=1))
        queue.push(_fragment(0.2, source_id=2))

        matched, remaining = queue.consume(0.3)

        assert [f.source_id for f in matched] == [1, 2]
        assert remaining == 0
        assert len(queue) == 0

    def test_near_equal_head_removed_whole(self):
        queue = LotQueue()
        queue.push(_fragment(0.30000000000000004, source_id=1))

        matched, remaining = queue.consume(0.3)

        assert len(matched) == 1
        assert remaining == 0
        assert not queue
