"""Tests for target-aware experience selection."""

from datetime import date

import pytest

from models.schemas.job import JobSelectionSignals, ParsedJobDescription, TargetJobContext
from models.schemas.profile import CanonicalProfile, Experience, Skill
from models.schemas.selection import SelectionOptions
from services.selection.budget import bullet_budget
from services.selection.selector import prioritize_skills, select_target_aware_profile


def _bullet(text, embedding=None, source_ids=("doc-1",)):
    return {"text": text, "embedding": embedding, "source_ids": list(source_ids)}


def _exp(exp_id, bullets, title="Analyst", company="Co", start="2015-01", end="2016-01", current=False, **kwargs):
    return Experience(
        id=exp_id,
        title=title,
        company=company,
        start_date=start,
        end_date=None if current else end,
        is_current=current,
        bullets=bullets,
        **kwargs,
    )


def _signals(hard_skills=("python", "sql"), soft_skills=(), queries=([1.0, 0.0],)):
    return JobSelectionSignals(
        parsed_job=ParsedJobDescription(hard_skills=list(hard_skills), soft_skills=list(soft_skills)),
        job_embedding=[1.0, 0.0],
        query_embeddings=[list(q) for q in queries],
    )


class TestEndToEnd:
    def test_two_experience_scenario(self, as_of):
        exp_a = _exp(
            "a",
            [
                _bullet("Automated Python reports saving 20% analyst time", [1.0, 0.0]),
                _bullet("Cut Python job runtime by 35%", [0.8, 0.6]),
                _bullet("Presented findings to the team", [0.6, 0.8]),
            ],
            title="Data Analyst",
            start="2024-07",
            current=True,
            tenure_months=18,
        )
        exp_b = _exp(
            "b",
            [_bullet("Coordinated office moves", [0.0, 1.0])],
            title="Office Coordinator",
            start="2015-01",
            end="2020-01",
            tenure_months=60,
        )
        profile = CanonicalProfile(experiences=[exp_a, exp_b])
        signals = _signals(hard_skills=["python"], soft_skills=["leadership"])

        result = select_target_aware_profile(
            profile,
            TargetJobContext(),
            signals,
            SelectionOptions(max_experiences=2, min_score=0.35, as_of=as_of),
        )

        assert result.diagnostics.job_keyword_sample == ["python", "leadership"]
        by_id = {t.id: t for t in result.experiences}
        assert set(by_id) == {"a", "b"}
        assert by_id["a"].score > by_id["b"].score
        assert [t.id for t in result.experiences] == ["a", "b"]

        writer = {w.id: w for w in result.writer_experiences}
        assert writer["a"].bullet_budget == bullet_budget(0, 18) == 6
        assert len(writer["a"].bullet_candidates) == 3
        assert len(writer["a"].bullet_candidates) <= bullet_budget(0, 18)
        assert writer["a"].bullet_candidates[0].text.startswith("Automated Python")
        assert all(c.source_ids for c in writer["a"].bullet_candidates)

        assert by_id["a"].selection_tier == "aligned"
        assert by_id["b"].selection_tier == "misaligned_fallback"
        assert [r.id for r in result.diagnostics.alignment_filtered] == ["b"]


class TestFallbackTiers:
    def _profile(self):
        return CanonicalProfile(experiences=[
            # misaligned, recent: scores above the aligned-but-weak roles
            _exp("m1", [_bullet("Planned events", [0.2, 0.98])], current=True, start="2020-01"),
            # aligned by keywords only, old
            _exp("l2", [_bullet("Python scripts")], end="2010-01", start="2008-01"),
            # misaligned, old
            _exp("m2", [_bullet("Made coffee")], end="2010-01", start="2008-01"),
            # aligned by keywords only, old, better keyword coverage
            _exp("l1", [_bullet("Python and SQL scripts")], end="2010-01", start="2008-01"),
            # aligned and strong
            _exp("h", [_bullet("Python and SQL modelling", [1.0, 0.0])], current=True, start="2021-01"),
        ])

    def test_fill_order(self, as_of):
        result = select_target_aware_profile(
            self._profile(),
            TargetJobContext(),
            _signals(),
            SelectionOptions(max_experiences=4, min_score=0.35, as_of=as_of),
        )
        assert [t.id for t in result.experiences] == ["h", "l1", "l2", "m1"]
        assert [t.selection_tier for t in result.experiences] == [
            "aligned",
            "aligned_below_threshold",
            "aligned_below_threshold",
            "misaligned_fallback",
        ]
        by_id = {t.id: t for t in result.experiences}
        # the misaligned fallback outscores the aligned ones it was placed behind
        assert by_id["m1"].score > by_id["l1"].score > by_id["l2"].score
        assert [r.id for r in result.diagnostics.alignment_filtered] == ["m1", "m2"]

        warnings = " | ".join(result.diagnostics.warnings)
        assert "below min_score=0.35" in warnings
        assert "misaligned experience(s) as low-confidence fallback" in warnings

    def test_stops_at_max_experiences(self, as_of):
        result = select_target_aware_profile(
            self._profile(),
            TargetJobContext(),
            _signals(),
            SelectionOptions(max_experiences=1, as_of=as_of),
        )
        assert [t.id for t in result.experiences] == ["h"]
        assert not any("fallback" in w for w in result.diagnostics.warnings)

    def test_never_empty_with_only_misaligned(self, as_of):
        profile = CanonicalProfile(experiences=[
            _exp("only", [_bullet("Made coffee")], title="Barista", end="2012-01", start="2010-01"),
        ])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        assert len(result.experiences) == 1
        assert result.experiences[0].selection_tier == "misaligned_fallback"
        assert result.experiences[0].alignment_reasons

    def test_never_empty_without_bullets(self, as_of):
        profile = CanonicalProfile(experiences=[_exp("bare", [], title="Analyst")])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        assert [t.id for t in result.experiences] == ["bare"]
        # no bullets means nothing for the writer
        assert result.writer_experiences == []
        assert any("no writer-ready bullets" in w for w in result.diagnostics.warnings)


class TestValidationDiagnostics:
    def test_dropped_and_flagged(self, as_of):
        profile = CanonicalProfile(experiences=[
            _exp("ok", [_bullet("Python work")]),
            _exp("untitled", [_bullet("Python work")], title="Job Title"),
            _exp("no-dates", [_bullet("Python work")], start=None, end=None),
            _exp("no-company", [_bullet("Python work")], company=""),
        ])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        diagnostics = result.diagnostics
        assert diagnostics.total_experiences == 4
        assert diagnostics.eligible_experiences == 2
        assert sorted(r.id for r in diagnostics.filtered_experiences) == ["no-dates", "untitled"]
        assert [r.id for r in diagnostics.flagged_experiences] == ["no-company"]
        assert diagnostics.flagged_experiences[0].reasons == ["Missing company name"]
        assert sorted(t.id for t in result.experiences) == ["no-company", "ok"]
        assert any("removed:" in w for w in diagnostics.warnings)

    def test_canonical_profile_untouched(self, as_of):
        exp = _exp("e", [_bullet("Python work"), _bullet("Lorem ipsum")], company="Company Name")
        profile = CanonicalProfile(experiences=[exp])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        assert profile.experiences[0].company == "Company Name"
        assert len(profile.experiences[0].bullets) == 2
        assert result.experiences[0].experience.company == ""
        assert len(result.experiences[0].experience.bullets) == 1

    def test_no_eligible_experiences(self, as_of):
        profile = CanonicalProfile(experiences=[_exp("x", [], title="")])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        assert result.experiences == []
        assert result.writer_experiences == []
        assert result.diagnostics.eligible_experiences == 0


class TestWriterPayload:
    def test_candidates_capped_at_twice_budget(self, as_of):
        bullets = [_bullet(f"Python task {i}", [1.0, 0.0]) for i in range(20)]
        profile = CanonicalProfile(experiences=[_exp("big", bullets, current=True, start="2020-01")])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        [targeted] = result.experiences
        assert targeted.bullet_budget == 6
        assert len(targeted.selected_bullets) == 6
        assert len(result.bullets) == 6
        assert len(result.writer_experiences[0].bullet_candidates) == 12

    def test_bullets_without_sources_withheld(self, as_of):
        profile = CanonicalProfile(experiences=[
            _exp("e", [
                _bullet("Python with 3 sources", [1.0, 0.0]),
                _bullet("Python without sources", [1.0, 0.0], source_ids=()),
            ]),
        ])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        [writer] = result.writer_experiences
        assert [c.text for c in writer.bullet_candidates] == ["Python with 3 sources"]
        assert len(result.experiences[0].bullet_candidates) == 2
        assert any("without source ids" in w for w in result.diagnostics.warnings)

    def test_max_writer_experiences(self, as_of):
        profile = CanonicalProfile(experiences=[
            _exp("a", [_bullet("Python and SQL", [1.0, 0.0])], current=True, start="2022-01"),
            _exp("b", [_bullet("Python and SQL", [1.0, 0.0])], current=True, start="2019-01"),
        ])
        result = select_target_aware_profile(
            profile,
            TargetJobContext(),
            _signals(),
            SelectionOptions(max_experiences=2, max_writer_experiences=1, as_of=as_of),
        )
        assert len(result.experiences) == 2
        assert len(result.writer_experiences) == 1

    def test_candidate_breakdown_and_summary(self, as_of):
        profile = CanonicalProfile(experiences=[
            _exp("e", [_bullet("Python reports for 40 teams", [1.0, 0.0])], current=True, start="2022-01"),
        ])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        candidate = result.writer_experiences[0].bullet_candidates[0]
        assert candidate.has_metric
        assert candidate.tool_matches == ["python"]
        assert candidate.score_breakdown.final == pytest.approx(1.0)

        [entry] = result.diagnostics.scoring_summary
        assert entry.experience_id == "e"
        assert entry.selection_tier == "aligned"
        assert entry.score == round(result.experiences[0].score, 3)

    def test_missing_embedding_warning(self, as_of):
        profile = CanonicalProfile(experiences=[_exp("e", [_bullet("Python work")])])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        assert any("missing embeddings" in w for w in result.diagnostics.warnings)

    def test_metric_and_free_text_bullets_reach_writer(self, as_of):
        texts = [
            "Cut p99 latency to <100ms while keeping uptime >99.9%",
            "Helped enterprise clients enter new markets in APAC",
            "Standardized job title taxonomy across 40 teams",
        ]
        profile = CanonicalProfile(experiences=[
            _exp("e", [_bullet(t, [1.0, 0.0]) for t in texts], current=True, start="2022-01"),
        ])
        result = select_target_aware_profile(
            profile, TargetJobContext(), _signals(), SelectionOptions(as_of=as_of)
        )
        assert len(result.bullets) == 3
        [writer] = result.writer_experiences
        assert sorted(c.text for c in writer.bullet_candidates) == sorted(texts)


class TestRankAndTenure:
    def _profile(self, last):
        experiences = [
            _exp(exp_id, [_bullet("Python and SQL", [1.0, 0.0])]) for exp_id in ("a", "b", "c", "d", "e")
        ]
        return CanonicalProfile(experiences=[*experiences, last])

    def _select(self, profile, as_of):
        result = select_target_aware_profile(
            profile,
            TargetJobContext(),
            _signals(),
            SelectionOptions(max_experiences=6, min_score=0.0, as_of=as_of),
        )
        return {t.rank: t for t in result.experiences}

    def test_duplicate_ids_ranked_by_position(self, as_of):
        duplicate = _exp("a", [_bullet("Python and SQL", [1.0, 0.0])], start="2015-01", end="2016-01")
        by_rank = self._select(self._profile(duplicate), as_of)
        assert sorted(by_rank) == [0, 1, 2, 3, 4, 5]
        assert by_rank[0].bullet_budget == 6
        assert by_rank[5].id == "a"
        assert by_rank[5].bullet_budget == 2

    def test_current_role_tenure_measured_to_as_of(self):
        current = _exp("f", [_bullet("Python and SQL", [1.0, 0.0])], current=True, start="2024-01")
        profile = self._profile(current)
        assert self._select(profile, date(2026, 1, 15))[5].bullet_budget == 3
        assert self._select(profile, date(2028, 1, 15))[5].bullet_budget == 4

    def test_unparseable_end_runs_to_as_of(self, as_of):
        vague = _exp("f", [_bullet("Python and SQL", [1.0, 0.0])], start="2020-01", end="sometime")
        assert self._select(self._profile(vague), as_of)[5].bullet_budget == 4


class TestSkills:
    SKILLS = [
        Skill(canonical_name="SQL"),
        Skill(canonical_name="Excel"),
        Skill(canonical_name="python"),
        Skill(canonical_name="Python"),
        Skill(canonical_name="Tableau"),
    ]

    def test_required_first_then_rest(self):
        skills = prioritize_skills(self.SKILLS, ["Python", "tableau"], cap=10)
        assert [s.canonical_name for s in skills] == ["python", "Tableau", "SQL", "Excel"]

    @pytest.mark.parametrize("cap,expected", [(0, 0), (2, 2), (3, 3), (40, 4)])
    def test_cap(self, cap, expected):
        assert len(prioritize_skills(self.SKILLS, ["Python"], cap=cap)) == expected

    def test_selection_uses_skill_cap_option(self, as_of):
        profile = CanonicalProfile(experiences=[_exp("e", [])], skills=self.SKILLS)
        result = select_target_aware_profile(
            profile,
            TargetJobContext(required_skills=["Excel"]),
            _signals(),
            SelectionOptions(skill_pool_cap=2, as_of=as_of),
        )
        assert [s.canonical_name for s in result.skills] == ["Excel", "SQL"]
