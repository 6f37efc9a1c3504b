from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import event

from app.core.exceptions import NotFoundError, ValidationError
from app.models import (
    Customer, Location, OrderComment, OrderItemConfiguration, OrderLocation, Payment,
    ScanNOrderSession, SessionOrderItem,
)
from app.services.orders.order_service import OrderAggregationService


class TestGetById:
    """Single order lookup"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order_id", ["does-not-exist", 999, "999", "99999999999999999999", 2 ** 31, 0, "-5"])
    async def test_unknown_order(self, db_session, seed, baseline, order_id):
        await seed.add(seed.order(1))
        with pytest.raises(NotFoundError):
            await OrderAggregationService(db_session).get_by_id("M1", order_id)

    @pytest.mark.asyncio
    async def test_other_merchant_order_is_not_found(self, db_session, seed, baseline):
        await seed.add(seed.order(5, merchant_id="M2"))
        with pytest.raises(NotFoundError):
            await OrderAggregationService(db_session).get_by_id("M1", 5)

    @pytest.mark.asyncio
    async def test_closed_order_is_found(self, db_session, seed, baseline):
        await seed.add(seed.order(1, state="CLOSED"))
        order = await OrderAggregationService(db_session).get_by_id("M1", "1")
        assert order.order_id == 1
        assert order.state == "CLOSED"

    @pytest.mark.asyncio
    async def test_configuration_marks_selected_options(self, db_session, seed, baseline):
        await seed.add(
            seed.order(1),
            seed.item(11, 1),
            OrderItemConfiguration(id=1, order_item_id=11, configuration_attribute_option_id=2, quantity=1),
        )

        order = await OrderAggregationService(db_session).get_by_id("M1", 1)

        attributes = order.products[0].configuration.attributes
        assert [a.title for a in attributes] == ["Cooking"]
        options = attributes[0].options
        assert [(o.title, o.selected, o.quantity) for o in options] == [("Rare", 0, 0), ("Well done", 1, 1)]

    @pytest.mark.asyncio
    async def test_customer_with_temporary_address(self, db_session, seed, baseline):
        await seed.add(
            Customer(
                customer_id=1, customer_name="Bob", customer_tel="0700000000", customer_nb_orders=4,
                customer_address="1 rue A", customer_lat=1.0, customer_lng=1.0,
                customer_temporary_address="9 rue B", customer_temporary_lat=2.0, customer_temporary_lng=2.0,
            ),
            seed.order(1, customer_id=1, use_customer_temporary_address=1),
            seed.order(2, customer_id=1),
        )
        service = OrderAggregationService(db_session)

        temporary = await service.get_by_id("M1", 1)
        permanent = await service.get_by_id("M1", 2)

        assert temporary.customer.customer_name == "Bob"
        assert temporary.customer.customer_nb_orders == 4
        assert temporary.customer.customer_address == "9 rue B"
        assert temporary.customer.customer_lat == 2.0
        assert permanent.customer.customer_address == "1 rue A"

    @pytest.mark.asyncio
    async def test_comments(self, db_session, seed, baseline):
        await seed.add(
            seed.order(1),
            seed.item(11, 1),
            seed.item(12, 1),
            OrderComment(id=1, order_id=1, user_id=1, content="Birthday table",
                         creation_date=datetime(2024, 5, 10, 12, 2)),
            OrderComment(id=2, order_id=1, order_item_id=11, user_id=1, content="No onions"),
            OrderComment(id=3, order_id=1, order_item_id=11, user_id=1, content="Extra sauce"),
        )

        order = await OrderAggregationService(db_session).get_by_id("M1", 1)

        assert [c.content for c in order.comments] == ["Birthday table"]
        assert order.comments[0].user_name == "alice"
        # One row per item even with several item comments
        assert [i.order_item_id for i in order.products] == [11, 12]
        assert order.products[0].comment.content == "No onions"
        assert order.products[1].comment.content == ""

    @pytest.mark.asyncio
    async def test_payments_locations_and_guests(self, db_session, seed, baseline):
        await seed.add(
            seed.order(1, is_paid=True),
            seed.item(11, 1),
            Payment(payment_id=2, order_id=1, mop="CARD", amount=15.0, enabled=1),
            Payment(payment_id=1, order_id=1, mop="CASH", amount=5.0, enabled=0),
            Location(location_id=1, merchant_id="M1", location_name="T1", location_desc="Terrace"),
            OrderLocation(id=1, order_id=1, location_id=1),
            ScanNOrderSession(user_code="g1", user_name="Guest one"),
            SessionOrderItem(id=1, order_item_id=11, user_code="g1", quantity=1),
        )

        order = await OrderAggregationService(db_session).get_by_id("M1", 1)

        assert order.isPaid == 1
        assert [(p.payment_id, p.mop, p.enabled) for p in order.payments] == [(1, "CASH", 0), (2, "CARD", 1)]
        assert [(l.location_name, l.location_desc) for l in order.location] == [("T1", "Terrace")]
        assert [(c.user_code, c.user_name) for c in order.products[0].customers] == [("g1", "Guest one")]

    @pytest.mark.asyncio
    async def test_responsible(self, db_session, seed, baseline):
        await seed.add(
            seed.order(1, responsible=baseline.driver_id),
            seed.order(2, responsible=-1),
            seed.order(3, responsible=0),
        )
        service = OrderAggregationService(db_session)

        assigned = await service.get_by_id("M1", 1)
        sno = await service.get_by_id("M1", 2)
        nobody = await service.get_by_id("M1", 3)

        assert assigned.responsible.id == baseline.driver_id
        assert assigned.responsible.tel == "0600000000"
        assert assigned.isSNO is False
        assert sno.isSNO is True
        assert sno.responsible is None
        assert nobody.responsible is None
        assert nobody.isSNO is False


class TestHistory:
    """Date range view"""

    @pytest.mark.asyncio
    async def test_range_includes_whole_days(self, db_session, seed, baseline):
        await seed.add(
            seed.order(1, state="CLOSED", creation_date=datetime(2024, 5, 1, 0, 0)),
            seed.order(2, state="CLOSED", creation_date=datetime(2024, 5, 2, 23, 59)),
            seed.order(3, state="CLOSED", creation_date=datetime(2024, 5, 3, 0, 0)),
            seed.order(4, state="CLOSED", creation_date=datetime(2024, 4, 30, 23, 59)),
        )

        response = await OrderAggregationService(db_session).get_history("M1", date(2024, 5, 1), date(2024, 5, 2))
        assert [o.order_id for o in response.orders] == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_range(self, db_session, baseline):
        response = await OrderAggregationService(db_session).get_history("M1", date(2024, 5, 1), date(2024, 5, 1))
        assert response.orders == []

    @pytest.mark.asyncio
    async def test_inverted_range(self, db_session, baseline):
        with pytest.raises(ValidationError):
            await OrderAggregationService(db_session).get_history("M1", date(2024, 5, 2), date(2024, 5, 1))

    @pytest.mark.asyncio
    async def test_range_up_to_the_last_date(self, db_session, seed, baseline):
        await seed.add(
            seed.order(1, state="CLOSED", creation_date=datetime(2023, 12, 31, 23, 59)),
            seed.order(2, state="CLOSED", creation_date=datetime(2024, 1, 1, 0, 0)),
            seed.order(3, state="CLOSED", creation_date=datetime(2030, 6, 1, 12, 0)),
        )

        response = await OrderAggregationService(db_session).get_history("M1", date(2024, 1, 1), date.max)
        assert [o.order_id for o in response.orders] == [2, 3]


class TestLongHistory:
    """Both strategies over many orders"""

    @pytest.mark.asyncio
    async def test_strategies_agree(self, db_session, seed, baseline):
        orders = [
            seed.order(order_id, state="CLOSED", creation_date=datetime(2024, 1, 1) + timedelta(hours=order_id))
            for order_id in range(1, 301)
        ]
        await seed.add(*orders)

        narrowed = await OrderAggregationService(db_session, "narrowed").get_history(
            "M1", date(2024, 1, 1), date(2024, 12, 31)
        )
        direct = await OrderAggregationService(db_session, "direct").get_history(
            "M1", date(2024, 1, 1), date(2024, 12, 31)
        )

        assert len(narrowed.orders) == 300
        assert [o.order_id for o in narrowed.orders] == [o.order_id for o in direct.orders]

    @pytest.mark.asyncio
    async def test_narrowed_batch_sends_ids_inline(self, engine, db_session, seed, baseline):
        await seed.add(seed.order(1), seed.order(2), seed.order(3))
        statements = []

        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append((statement, parameters))

        event.listen(engine.sync_engine, "before_cursor_execute", capture)
        try:
            await OrderAggregationService(db_session, "narrowed").get_pending("M1")
        finally:
            event.remove(engine.sync_engine, "before_cursor_execute", capture)

        assert any("orders.order_id IN (1, 2, 3)" in sql for sql, _ in statements)
        assert not any("IN (?, ?, ?)" in sql for sql, _ in statements)
