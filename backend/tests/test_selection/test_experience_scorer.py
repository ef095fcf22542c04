import pytest

from models.schemas.profile import Experience
from models.schemas.selection import TargetedBullet
from services.selection.experience_scorer import (
    alignment_reasons,
    compute_bullet_score,
    compute_keyword_score,
    compute_metric_density,
    compute_recency_score,
    score_experience,
)


def _bullet(i, similarity=0.0, text="", has_metric=False):
    return TargetedBullet(id=f"b{i}", text=text, similarity=similarity, has_metric=has_metric)


class TestBulletScore:
    def test_position_weighted(self):
        bullets = [_bullet(0, 1.0), _bullet(1, 0.5)]
        assert compute_bullet_score(bullets) == pytest.approx((1.0 + 0.5 * 0.9) / 1.9)

    def test_uniform_similarity_is_preserved(self):
        bullets = [_bullet(i, 0.4) for i in range(12)]
        assert compute_bullet_score(bullets) == pytest.approx(0.4)

    def test_weight_floor(self):
        # positions 7+ all weigh 0.35
        bullets = [_bullet(i, 0.0) for i in range(9)] + [_bullet(9, 1.0)]
        weights = [1.0, 0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.35, 0.35, 0.35]
        assert compute_bullet_score(bullets) == pytest.approx(0.35 / sum(weights))

    def test_empty(self):
        assert compute_bullet_score([]) == 0.0


class TestKeywordScore:
    def setup_method(self):
        self.exp = Experience(id="e", title="Data Engineer", company="Acme", location="Berlin")
        self.bullets = [_bullet(0, text="Built Python pipelines for billing")]

    def test_single_words(self):
        score = compute_keyword_score(self.exp, self.bullets, ["python", "leadership"])
        assert score == pytest.approx(0.5)

    def test_case_insensitive_dedupe(self):
        score = compute_keyword_score(self.exp, self.bullets, ["Python", "python", "PYTHON"])
        assert score == pytest.approx(1.0)

    def test_exact_phrase_weighs_double(self):
        score = compute_keyword_score(self.exp, self.bullets, ["python pipelines", "kafka"])
        assert score == pytest.approx(2 / 3)

    def test_scattered_phrase_gets_half_credit(self):
        score = compute_keyword_score(self.exp, self.bullets, ["python", "data pipelines"])
        assert score == pytest.approx((1 + 1) / 3)

    def test_title_company_and_location_count(self):
        score = compute_keyword_score(self.exp, [], ["engineer", "acme", "berlin"])
        assert score == pytest.approx(1.0)

    def test_no_keywords(self):
        assert compute_keyword_score(self.exp, self.bullets, []) == 0.0


class TestRecencyScore:
    @pytest.mark.parametrize(
        "end_date,expected",
        [
            ("2025-07", 1.0),   # exactly 6 months
            ("2025-06", 0.9),   # 7 months
            ("2025-01", 0.9),   # 12 months
            ("2023-01", 0.7),   # 36 months
            ("2021-01", 0.5),   # 60 months
            ("2016-01", 0.3),   # 120 months
            ("2015-12", 0.15),  # 121 months
        ],
    )
    def test_steps(self, as_of, end_date, expected):
        exp = Experience(id="e", start_date="2010-01", end_date=end_date)
        assert compute_recency_score(exp, as_of) == pytest.approx(expected)

    def test_current_role(self, as_of):
        exp = Experience(id="e", start_date="2020-01", is_current=True)
        assert compute_recency_score(exp, as_of) == 1.0

    def test_unresolvable_end(self, as_of):
        exp = Experience(id="e", start_date="2020-01", end_date="someday")
        assert compute_recency_score(exp, as_of) == pytest.approx(0.35)


def test_metric_density():
    bullets = [_bullet(0, has_metric=True), _bullet(1), _bullet(2, has_metric=True), _bullet(3)]
    assert compute_metric_density(bullets) == pytest.approx(0.5)
    assert compute_metric_density([]) == 0.0


class TestAlignment:
    def test_either_signal_is_enough(self):
        assert alignment_reasons(0.30, 0.0) == []
        assert alignment_reasons(0.0, 0.20) == []

    def test_reasons_cite_values_and_thresholds(self):
        assert alignment_reasons(0.12, 0.05) == [
            "semantic_alignment=0.12 (<0.30)",
            "keyword_alignment=0.05 (<0.20)",
        ]


class TestScoreExperience:
    def test_combined_score(self, as_of):
        exp = Experience(id="e", title="Analyst", start_date="2020-01", is_current=True)
        bullets = [
            _bullet(0, 0.8, text="Grew revenue 10% with SQL", has_metric=True),
            _bullet(1, 0.6, text="Automated reporting"),
        ]
        result = score_experience(exp, bullets, ["sql", "python"], budget=6, as_of=as_of)

        bullet_score = (0.8 + 0.6 * 0.9) / 1.9
        expected = bullet_score * 0.55 + 0.5 * 0.2 + 1.0 * 0.2 + 0.5 * 0.05
        assert result.score == pytest.approx(expected)
        assert result.signals.bullet_score == pytest.approx(bullet_score)
        assert result.signals.keyword_score == pytest.approx(0.5)
        assert result.signals.recency_score == 1.0
        assert result.signals.metric_density == pytest.approx(0.5)
        assert result.alignment_eligible
        assert result.alignment_reasons == []

    def test_only_budgeted_bullets_count(self, as_of):
        exp = Experience(id="e", title="Analyst", start_date="2020-01", is_current=True)
        bullets = [_bullet(0, 0.9), _bullet(1, 0.9), _bullet(2, 0.0, text="python")]
        result = score_experience(exp, bullets, ["python"], budget=2, as_of=as_of)
        assert result.signals.bullet_score == pytest.approx(0.9)
        assert result.signals.keyword_score == 0.0

    def test_misaligned(self, as_of):
        exp = Experience(id="e", title="Barista", start_date="2020-01", end_date="2021-01")
        bullets = [_bullet(0, 0.1, text="Made coffee")]
        result = score_experience(exp, bullets, ["python", "sql"], budget=6, as_of=as_of)
        assert not result.alignment_eligible
        assert len(result.alignment_reasons) == 2
        assert 0.0 <= result.score <= 1.0
