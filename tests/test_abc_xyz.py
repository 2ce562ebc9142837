import pytest

from food_insights.config.business_config import BusinessConfig
from food_insights.insights.abc_xyz import (
    classify_abc, classify_xyz, coefficient_of_variation, compute_abc_xyz, empty_matrix,
)


def test_single_product_is_class_c_by_default(make_purchase, config):
    purchases = [
        make_purchase('2024-01-10', 'M1', 10, 100),
        make_purchase('2024-02-10', 'M1', 10, 100),
        make_purchase('2024-03-10', 'M1', 10, 100),
    ]

    result = compute_abc_xyz(purchases, config)

    item = result.items[0]
    assert item.cumulative_share == pytest.approx(100)
    assert item.abc_class == 'C'
    assert item.cv == pytest.approx(0)
    assert item.xyz_class == 'X'
    assert item.combined == 'CX'
    assert item.month_count == 3
    assert result.matrix['CX'] == 1


def test_single_product_is_class_a_when_threshold_is_100(make_purchase):
    config = BusinessConfig(abc_class_a_threshold=100, abc_class_b_threshold=100)
    purchases = [make_purchase('2024-01-10', 'M1', 10, 100)]

    assert compute_abc_xyz(purchases, config).items[0].combined == 'AX'


def test_empty_input_gives_zero_matrix(config):
    result = compute_abc_xyz([], config)

    assert result.items == []
    assert result.matrix == empty_matrix()
    assert len(result.matrix) == 9
    assert sum(result.matrix.values()) == 0
    assert result.abc_summary == {'A': 0, 'B': 0, 'C': 0}
    assert result.total_spent == 0


def test_pareto_ranking(make_purchase, config):
    purchases = [
        make_purchase('2024-01-10', 'SMALL', 1, 100),
        make_purchase('2024-01-10', 'BIG', 1, 700),
        make_purchase('2024-01-10', 'MID', 1, 200),
    ]

    result = compute_abc_xyz(purchases, config)

    assert [i.product_code for i in result.items] == ['BIG', 'MID', 'SMALL']
    assert [i.abc_class for i in result.items] == ['A', 'B', 'C']
    assert [i.spent_share for i in result.items] == [70, 20, 10]
    assert result.items[-1].cumulative_share == pytest.approx(100)
    assert result.total_spent == pytest.approx(1000)
    assert result.total_items == 3


def test_zero_spend_products_are_excluded(make_purchase, config):
    purchases = [
        make_purchase('2024-01-10', 'FREE', 5, 0),
        make_purchase('2024-01-10', 'PAID', 5, 100),
    ]

    result = compute_abc_xyz(purchases, config)

    assert [i.product_code for i in result.items] == ['PAID']


def test_summaries_match_matrix(make_purchase, config):
    purchases = [
        make_purchase('2024-01-10', 'A1', 1, 500),
        make_purchase('2024-02-10', 'A1', 1, 1500),
        make_purchase('2024-01-10', 'B1', 1, 300),
        make_purchase('2024-01-10', 'C1', 1, 100),
    ]

    result = compute_abc_xyz(purchases, config)

    assert sum(result.matrix.values()) == result.total_items
    assert sum(result.abc_summary.values()) == result.total_items
    assert sum(result.xyz_summary.values()) == result.total_items


@pytest.mark.parametrize("months, expected", [
    ([100, 300], 'X'),
    ([100, 500], 'Y'),
    ([100, 100, 1000], 'Z'),
])
def test_xyz_from_monthly_volatility(months, expected, config):
    cv = coefficient_of_variation(months)

    assert classify_xyz(cv, config.xyz_class_x_threshold, config.xyz_class_y_threshold) == expected


def test_cv_needs_two_months():
    assert coefficient_of_variation([500]) == 0
    assert coefficient_of_variation([]) == 0
    assert coefficient_of_variation([100, 300]) == pytest.approx(0.5)


def test_class_boundaries_are_inclusive():
    assert classify_abc(70, 70, 90) == 'A'
    assert classify_abc(70.01, 70, 90) == 'B'
    assert classify_abc(90, 70, 90) == 'B'
    assert classify_abc(90.01, 70, 90) == 'C'
    assert classify_xyz(0.5, 0.5, 1.0) == 'X'
    assert classify_xyz(1.0, 0.5, 1.0) == 'Y'


def test_xyz_class_never_improves_as_volatility_grows(config):
    ranks = {'X': 0, 'Y': 1, 'Z': 2}
    cvs = [step / 20 for step in range(0, 61)]

    classes = [
        classify_xyz(cv, config.xyz_class_x_threshold, config.xyz_class_y_threshold)
        for cv in cvs
    ]

    assert [ranks[c] for c in classes] == sorted(ranks[c] for c in classes)
    assert set(classes) == {'X', 'Y', 'Z'}


def test_spikier_spend_gets_a_worse_xyz_class(make_purchase, config):
    # two flat months then a spike of `factor` times the base spend
    factors = {'FLAT': 1, 'P2': 2, 'P3': 3, 'P5': 5, 'P10': 10, 'P30': 30}
    purchases = []
    for code, factor in factors.items():
        purchases += [
            make_purchase('2024-01-15', code, 100, 1),
            make_purchase('2024-02-15', code, 100, 1),
            make_purchase('2024-03-15', code, 100 * factor, 1),
        ]

    result = compute_abc_xyz(purchases, config)

    by_code = {i.product_code: i for i in result.items}
    ordered = [by_code[code] for code in factors]
    cvs = [i.cv for i in ordered]
    assert cvs == sorted(cvs)
    assert [i.xyz_class for i in ordered] == ['X', 'X', 'Y', 'Y', 'Z', 'Z']
