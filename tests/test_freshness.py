import pytest

from food_insights.data.records import InventorySafetyItem
from food_insights.insights.freshness import (
    coverage_score, compute_freshness, grade_for_score, recency_score, stability_score,
)
from food_insights.optimization.statistical_order import NO_DEMAND_DAYS


def stock(code, qty):
    return InventorySafetyItem(sku_code=code, sku_name=code, current_stock=qty)


def test_frequently_bought_item_is_safe(make_daily_purchases, config):
    purchases = make_daily_purchases('M1', 10, 10)

    result = compute_freshness(purchases, [stock('M1', 100)], config)

    item = result.items[0]
    assert item.days_since_last_purchase == 0
    assert item.avg_daily_demand == pytest.approx(10)
    assert item.estimated_days_left == pytest.approx(10)
    assert item.recency_score == pytest.approx(100)
    assert item.coverage_score == pytest.approx(83.3)
    assert item.stability_score == pytest.approx(100)
    assert item.score == 95
    assert item.grade == 'safe'
    assert result.as_of == '2024-01-10'


def test_stale_single_purchase(make_purchase, config):
    purchases = [make_purchase('2024-01-01', 'M1', 10, 100)]

    result = compute_freshness(purchases, [], config, as_of='2024-01-10')

    item = result.items[0]
    assert item.days_since_last_purchase == 9
    assert item.current_stock == 0
    assert item.recency_score == pytest.approx(70)
    assert item.coverage_score == pytest.approx(100)
    assert item.score == 61
    assert item.grade == 'good'


def test_scores_sorted_worst_first(make_purchase, make_daily_purchases, config):
    purchases = make_daily_purchases('FRESH', 10, 10) + [
        make_purchase('2023-12-01', 'OLD', 10, 100),
    ]

    result = compute_freshness(purchases, [stock('FRESH', 100), stock('OLD', 1000)], config)

    scores = [i.score for i in result.items]
    assert scores == sorted(scores)
    assert result.items[0].product_code == 'OLD'
    assert all(0 <= s <= 100 for s in scores)
    assert sum(result.grade_count.values()) == 2


def test_empty_purchases(config):
    result = compute_freshness([], [], config)

    assert result.items == []
    assert result.avg_score == 0
    assert set(result.grade_count) == {'safe', 'good', 'caution', 'warning', 'danger'}


def test_component_scores_are_bounded():
    assert recency_score(0) == 100
    assert recency_score(45) == 0
    assert coverage_score(0) == 100
    assert coverage_score(120) == 0
    assert coverage_score(NO_DEMAND_DAYS) == 0
    assert stability_score(25) == 100


def test_grade_bands():
    assert grade_for_score(80) == 'safe'
    assert grade_for_score(79) == 'good'
    assert grade_for_score(40) == 'caution'
    assert grade_for_score(20) == 'warning'
    assert grade_for_score(19) == 'danger'


GRADE_ORDER = ['danger', 'warning', 'caution', 'good', 'safe']


@pytest.mark.parametrize("as_of", [None, '2024-02-15', '2030-01-01'])
def test_scores_stay_within_bounds(make_purchase, make_daily_purchases, config, as_of):
    purchases = (
        make_daily_purchases('DAILY', 5, 60)
        + [make_purchase('2024-01-01', 'ONCE', 1, 1000)]
        + [make_purchase('2024-02-01', 'HUGE', 1_000_000, 1)]
        + make_daily_purchases('TINY', 0.001, 3, start='2024-02-10')
    )
    inventory = [stock('DAILY', 0), stock('ONCE', 1_000_000_000), stock('TINY', 5)]

    result = compute_freshness(purchases, inventory, config, as_of=as_of)

    assert len(result.items) == 4
    for item in result.items:
        for component in (item.recency_score, item.coverage_score, item.stability_score):
            assert 0 <= component <= 100
        assert 0 <= item.score <= 100
        assert item.grade == grade_for_score(item.score)
        assert item.days_since_last_purchase >= 0
    assert sum(result.grade_count.values()) == len(result.items)
    assert [i.score for i in result.items] == sorted(i.score for i in result.items)


def test_grade_never_drops_as_score_rises():
    ranks = [GRADE_ORDER.index(grade_for_score(score)) for score in range(0, 101)]

    assert ranks == sorted(ranks)
    assert grade_for_score(0) == 'danger'
    assert grade_for_score(100) == 'safe'
