"""Keyword rule tables for goal decomposition.

Every classification here is an ordered list evaluated first-match-wins,
with an explicit default. Callers may inject their own tables through
``PlannerTables``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from core.models import Goal, KeyResult

StrategyPredicate = Callable[[Goal, Sequence[KeyResult]], bool]

MILESTONE_BASED = "milestone_based"
SKILL_BASED = "skill_based"
HABIT_BASED = "habit_based"
PROJECT_BASED = "project_based"
TIME_BASED = "time_based"

DEFAULT_STRATEGY = TIME_BASED

BUSINESS_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


@dataclass(frozen=True)
class StrategyRule:
    """One (predicate, strategy) entry of the selection list."""

    strategy: str
    predicate: StrategyPredicate
    description: str = ""


@dataclass(frozen=True)
class TaskTemplate:
    """Fixed task shape instantiated for every matching milestone."""

    title: str
    estimated_minutes: int
    priority: str


def contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def first_match(text: str, table: Sequence[tuple[Sequence[str], object]], default: object) -> object:
    """Return the value of the first entry whose keywords occur in text."""
    for keywords, value in table:
        if contains_any(text, keywords):
            return value
    return default


def keyword_rule(strategy: str, keywords: Sequence[str]) -> StrategyRule:
    words = tuple(keywords)
    return StrategyRule(
        strategy=strategy,
        predicate=lambda goal, _key_results: contains_any(goal.text, words),
        description=f"goal text mentions one of: {', '.join(words)}",
    )


STRATEGY_KEYWORDS: dict[str, list[str]] = {
    SKILL_BASED: ["learn", "skill", "master"],
    HABIT_BASED: ["habit", "daily", "routine"],
    PROJECT_BASED: ["project", "build", "create"],
}


def default_strategy_rules(
    keywords: dict[str, list[str]] | None = None,
    min_key_results: int = 3,
) -> list[StrategyRule]:
    """Build the ordered strategy selection list."""
    table = {**STRATEGY_KEYWORDS, **(keywords or {})}
    return [
        StrategyRule(
            strategy=MILESTONE_BASED,
            predicate=lambda _goal, key_results: len(key_results) >= min_key_results,
            description=f"{min_key_results} or more key results",
        ),
        keyword_rule(SKILL_BASED, table[SKILL_BASED]),
        keyword_rule(HABIT_BASED, table[HABIT_BASED]),
        keyword_rule(PROJECT_BASED, table[PROJECT_BASED]),
    ]


def select_strategy(
    rules: Sequence[StrategyRule],
    goal: Goal,
    key_results: Sequence[KeyResult],
    default: str = DEFAULT_STRATEGY,
) -> str:
    """Return the strategy of the first matching rule, else the default."""
    for rule in rules:
        if rule.predicate(goal, key_results):
            return rule.strategy
    return default


# ── Milestone content tables ─────────────────────────────────────────

SKILL_TABLE: list[tuple[list[str], list[str]]] = [
    (["programming"], ["Algorithm Design", "Code Architecture", "Testing", "Debugging"]),
    (["design"], ["Visual Design", "User Research", "Prototyping", "Design Systems"]),
    (["business"], ["Market Research", "Financial Planning", "Strategy", "Operations"]),
    (["fitness"], ["Exercise Form", "Nutrition Planning", "Recovery", "Goal Setting"]),
    (["learning"], ["Research Skills", "Note Taking", "Practice Methods", "Application"]),
]
GENERIC_SKILLS = ["Planning", "Execution", "Review", "Optimization"]

SUB_PROJECT_TABLE: list[tuple[list[str], list[str]]] = [
    (["app", "software"], ["Requirements Analysis", "Design & Architecture", "Development", "Testing", "Deployment"]),
    (["business", "startup"], ["Market Research", "Business Plan", "MVP Development", "Marketing Strategy", "Launch"]),
    (["book", "write"], ["Research & Outline", "First Draft", "Revision", "Editing", "Publishing"]),
]
GENERIC_SUB_PROJECTS = ["Planning", "Foundation", "Development", "Refinement", "Completion"]

HABIT_TABLE: list[tuple[list[str], list[str]]] = [
    (["fitness"], ["Daily Exercise", "Meal Planning", "Sleep Schedule", "Progress Tracking"]),
    (["learning"], ["Daily Reading", "Practice Sessions", "Note Review", "Skill Application"]),
    (["productivity"], ["Daily Planning", "Focus Blocks", "Review Sessions", "Task Completion"]),
    (["creative"], ["Daily Practice", "Inspiration Gathering", "Skill Building", "Project Work"]),
]
GENERIC_HABITS = ["Daily Progress", "Weekly Review", "Monthly Assessment", "Continuous Improvement"]

GENERIC_PHASES = ["Foundation", "Development", "Refinement", "Completion"]

TIMEFRAME_TABLE: list[tuple[list[str], int]] = [
    (["year"], 365),
    (["quarter"], 90),
    (["month"], 30),
    (["week"], 7),
]

# ── Task templates ───────────────────────────────────────────────────

TASK_TEMPLATE_TABLE: list[tuple[list[str], list[TaskTemplate]]] = [
    (
        ["planning", "foundation"],
        [
            TaskTemplate("Define requirements and scope", 120, "high"),
            TaskTemplate("Research best practices", 90, "medium"),
            TaskTemplate("Create initial plan", 60, "high"),
            TaskTemplate("Set up tools and environment", 45, "medium"),
        ],
    ),
    (
        ["development", "building"],
        [
            TaskTemplate("Start core implementation", 180, "high"),
            TaskTemplate("Develop key features", 240, "high"),
            TaskTemplate("Create supporting materials", 120, "medium"),
            TaskTemplate("Test and validate approach", 90, "high"),
        ],
    ),
    (
        ["completion", "final"],
        [
            TaskTemplate("Final review and polish", 90, "high"),
            TaskTemplate("Documentation and cleanup", 60, "medium"),
            TaskTemplate("Prepare for next phase", 30, "low"),
            TaskTemplate("Celebrate completion", 15, "low"),
        ],
    ),
]


def generic_task_templates(milestone_title: str) -> list[TaskTemplate]:
    return [
        TaskTemplate(f"Work on {milestone_title}", 120, "medium"),
        TaskTemplate(f"Review progress on {milestone_title}", 30, "low"),
        TaskTemplate(f"Plan next steps for {milestone_title}", 45, "medium"),
    ]


# ── Weekly schedule tables ───────────────────────────────────────────

PREFERRED_DAYS_TABLE: list[tuple[list[str], list[str]]] = [
    (["fitness", "exercise"], ["monday", "wednesday", "friday"]),
    (["learning", "study"], ["tuesday", "thursday", "saturday"]),
    (["creative", "art", "write"], ["saturday", "sunday"]),
]

PREFERRED_SLOTS_TABLE: list[tuple[list[str], list[tuple[str, str, list[str]]]]] = [
    (
        ["fitness", "exercise"],
        [
            ("07:00", "08:00", ["monday", "wednesday", "friday"]),
            ("18:00", "19:00", ["tuesday", "thursday"]),
        ],
    ),
    (["creative", "write"], [("06:00", "08:00", ["saturday", "sunday"])]),
]
DEFAULT_SLOTS: list[tuple[str, str, list[str]]] = [
    ("09:00", "11:00", BUSINESS_DAYS),
    ("14:00", "16:00", BUSINESS_DAYS),
]


@dataclass
class PlannerTables:
    """Injected keyword configuration for a ``GoalDecomposer``."""

    strategy_rules: list[StrategyRule] = field(default_factory=default_strategy_rules)
    default_strategy: str = DEFAULT_STRATEGY
    skills: list[tuple[list[str], list[str]]] = field(default_factory=lambda: list(SKILL_TABLE))
    generic_skills: list[str] = field(default_factory=lambda: list(GENERIC_SKILLS))
    sub_projects: list[tuple[list[str], list[str]]] = field(default_factory=lambda: list(SUB_PROJECT_TABLE))
    generic_sub_projects: list[str] = field(default_factory=lambda: list(GENERIC_SUB_PROJECTS))
    habits: list[tuple[list[str], list[str]]] = field(default_factory=lambda: list(HABIT_TABLE))
    generic_habits: list[str] = field(default_factory=lambda: list(GENERIC_HABITS))
    generic_phases: list[str] = field(default_factory=lambda: list(GENERIC_PHASES))
    timeframes: list[tuple[list[str], int]] = field(default_factory=lambda: list(TIMEFRAME_TABLE))
    task_templates: list[tuple[list[str], list[TaskTemplate]]] = field(
        default_factory=lambda: list(TASK_TEMPLATE_TABLE)
    )
    preferred_days: list[tuple[list[str], list[str]]] = field(default_factory=lambda: list(PREFERRED_DAYS_TABLE))
    preferred_slots: list[tuple[list[str], list[tuple[str, str, list[str]]]]] = field(
        default_factory=lambda: list(PREFERRED_SLOTS_TABLE)
    )
    default_days: list[str] = field(default_factory=lambda: list(BUSINESS_DAYS))
    default_slots: list[tuple[str, str, list[str]]] = field(default_factory=lambda: list(DEFAULT_SLOTS))

    def templates_for(self, milestone_title: str) -> list[TaskTemplate]:
        title = milestone_title.lower()
        templates = first_match(title, self.task_templates, None)
        if templates is None:
            return generic_task_templates(milestone_title)
        return list(templates)  # type: ignore[arg-type]
