"""Bottleneck detection across time, skill, dependency and energy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from core.models import Goal, Task
from risk.models import ResourceConstraints, RiskFactor

OVERALLOCATION_RATIO = 1.2
DEEP_WORK_SHARE = 0.4
DEEP_WORK_SLACK = 1.1
SKILL_GAP_THRESHOLD = 0.2
HOURS_PER_SKILL_LEVEL = 40
CRITICAL_PATH_SHARE = 0.3
ENERGY_SLACK = 1.2

DEEP_WORK_KEYWORDS = ("design", "create", "analyze")
STAKEHOLDER_KEYWORDS = ("approval", "review", "feedback")
SKILL_KEYWORDS = (
    "programming",
    "design",
    "analysis",
    "writing",
    "presentation",
    "research",
    "planning",
    "leadership",
    "communication",
    "technical",
)
REQUIRED_SKILL_LEVELS: dict[str, float] = {
    "programming": 0.8,
    "design": 0.7,
    "analysis": 0.6,
    "writing": 0.5,
    "presentation": 0.6,
}
DEFAULT_REQUIRED_SKILL_LEVEL = 0.6
SKILL_ALTERNATIVES: dict[str, list[str]] = {
    "programming": ["Use low-code tools", "Hire developer", "Partner with technical team"],
    "design": ["Use templates", "Hire designer", "Use AI design tools"],
    "analysis": ["Use analytics tools", "Hire analyst", "Simplify to basic metrics"],
    "writing": ["Use writing tools", "Hire writer", "Focus on bullet points"],
}
DEFAULT_SKILL_ALTERNATIVES = ["Delegate", "Outsource", "Simplify approach"]

PRIORITY_WEIGHTS = {"critical": 1.0, "high": 0.8, "medium": 0.6, "low": 0.4}
COMPLEXITY_WEIGHTS = {"expert": 1.0, "complex": 0.8, "moderate": 0.6, "simple": 0.4}


@dataclass
class TimeBottleneck:
    resource: str
    severity: float
    impact: list[str] = field(default_factory=list)
    mitigation: list[str] = field(default_factory=list)


@dataclass
class SkillBottleneck:
    skill: str
    gap: float
    learning_hours: float
    alternatives: list[str] = field(default_factory=list)


@dataclass
class DependencyBottleneck:
    dependency: str
    blocking_tasks: list[str]
    critical_path: bool
    risk_level: float = 0.6


@dataclass
class EnergyBottleneck:
    pattern: str
    frequency: float
    energy_impact: float
    solutions: list[str] = field(default_factory=list)


@dataclass
class BottleneckAnalysis:
    time: list[TimeBottleneck] = field(default_factory=list)
    skill: list[SkillBottleneck] = field(default_factory=list)
    dependency: list[DependencyBottleneck] = field(default_factory=list)
    energy: list[EnergyBottleneck] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.time) + len(self.skill) + len(self.dependency) + len(self.energy)


def _hours(tasks: Sequence[Task]) -> float:
    return sum(task.minutes for task in tasks) / 60.0


def _task_text(task: Task) -> str:
    return f"{task.title} {task.description}".lower()


def time_bottlenecks(tasks: Sequence[Task], constraints: ResourceConstraints) -> list[TimeBottleneck]:
    found: list[TimeBottleneck] = []
    available = max(constraints.weekly_hours, 0.01)
    ratio = _hours(tasks) / available
    if ratio > OVERALLOCATION_RATIO:
        found.append(
            TimeBottleneck(
                resource="Total Time Allocation",
                severity=min(1.0, (ratio - 1.0) * 2),
                impact=[
                    "Goal deadline at risk",
                    "Potential quality compromise",
                    "Burnout risk increase",
                    "Other goals may suffer",
                ],
                mitigation=[
                    "Reduce scope or delegate tasks",
                    "Extend deadline if possible",
                    "Increase time allocation",
                    "Parallelize work streams",
                    "Focus on highest impact activities",
                ],
            )
        )

    deep_work = [task for task in tasks if any(word in _task_text(task) for word in DEEP_WORK_KEYWORDS)]
    deep_hours = _hours(deep_work)
    deep_available = available * DEEP_WORK_SHARE
    if deep_hours > deep_available * DEEP_WORK_SLACK:
        found.append(
            TimeBottleneck(
                resource="Deep Work Time",
                severity=min(1.0, deep_hours / deep_available - 1.0),
                impact=[
                    "Complex tasks may be rushed",
                    "Quality concerns for critical deliverables",
                    "Innovation and creativity constrained",
                ],
                mitigation=[
                    "Protect larger time blocks for deep work",
                    "Eliminate non-essential meetings",
                    "Batch similar shallow tasks",
                    "Consider alternative approaches requiring less deep thought",
                ],
            )
        )
    return found


def required_skills(goal: Goal, tasks: Sequence[Task]) -> list[str]:
    text = " ".join([goal.text, *(_task_text(task) for task in tasks)])
    return [skill for skill in SKILL_KEYWORDS if skill in text]


def skill_gap(skill: str, current_level: float) -> float:
    return max(0.0, REQUIRED_SKILL_LEVELS.get(skill, DEFAULT_REQUIRED_SKILL_LEVEL) - current_level)


def skill_bottlenecks(goal: Goal, tasks: Sequence[Task], constraints: ResourceConstraints) -> list[SkillBottleneck]:
    found: list[SkillBottleneck] = []
    for skill in required_skills(goal, tasks):
        gap = skill_gap(skill, constraints.skill_level)
        if gap > SKILL_GAP_THRESHOLD:
            found.append(
                SkillBottleneck(
                    skill=skill,
                    gap=gap,
                    learning_hours=gap * HOURS_PER_SKILL_LEVEL,
                    alternatives=list(SKILL_ALTERNATIVES.get(skill, DEFAULT_SKILL_ALTERNATIVES)),
                )
            )
    return found


def dependency_bottlenecks(tasks: Sequence[Task]) -> list[DependencyBottleneck]:
    waiting = [
        task for task in tasks if any(word in (task.description or "").lower() for word in STAKEHOLDER_KEYWORDS)
    ]
    if not waiting:
        return []
    return [
        DependencyBottleneck(
            dependency="External Stakeholder Approvals",
            blocking_tasks=[task.title for task in waiting],
            critical_path=len(waiting) > len(tasks) * CRITICAL_PATH_SHARE,
        )
    ]


def goal_intensity(goal: Goal) -> float:
    return PRIORITY_WEIGHTS.get(goal.priority, 0.6) * COMPLEXITY_WEIGHTS.get(goal.complexity, 0.6)


def energy_bottlenecks(goal: Goal, constraints: ResourceConstraints) -> list[EnergyBottleneck]:
    intensity = goal_intensity(goal)
    if intensity <= constraints.energy_capacity * ENERGY_SLACK:
        return []
    return [
        EnergyBottleneck(
            pattern="High Intensity vs Energy Capacity Mismatch",
            frequency=0.8,
            energy_impact=intensity - constraints.energy_capacity,
            solutions=[
                "Break goal into smaller, less intensive milestones",
                "Increase recovery time between intensive periods",
                "Build energy capacity through better habits",
                "Delegate high-energy tasks where possible",
                "Time intensive work during natural energy peaks",
            ],
        )
    ]


def analyze_bottlenecks(goal: Goal, tasks: Sequence[Task], constraints: ResourceConstraints) -> BottleneckAnalysis:
    return BottleneckAnalysis(
        time=time_bottlenecks(tasks, constraints),
        skill=skill_bottlenecks(goal, tasks, constraints),
        dependency=dependency_bottlenecks(tasks),
        energy=energy_bottlenecks(goal, constraints),
    )


def _tier(value: float, high: float, medium: float) -> str:
    if value > high:
        return "high"
    if value > medium:
        return "medium"
    return "low"


def bottleneck_factors(analysis: BottleneckAnalysis) -> list[RiskFactor]:
    """Flatten a bottleneck analysis into risk factors."""
    factors: list[RiskFactor] = []
    for item in analysis.time:
        factors.append(
            RiskFactor(
                type="resource",
                description=f"Time constraint: {item.resource} ({item.severity:.0%} severity)",
                impact=_tier(item.severity, 0.7, 0.4),
                mitigation=", ".join(item.mitigation),
            )
        )
    for item in analysis.skill:
        factors.append(
            RiskFactor(
                type="scope",
                description=f"Skill gap: {item.skill} ({item.gap:.0%} gap)",
                impact=_tier(item.gap, 0.6, 0.3),
                mitigation=(
                    f"Learning time required: {item.learning_hours:.0f} hours. "
                    f"Alternatives: {', '.join(item.alternatives)}"
                ),
            )
        )
    for item in analysis.dependency:
        factors.append(
            RiskFactor(
                type="dependencies",
                description=f"Dependency risk: {item.dependency} blocking {len(item.blocking_tasks)} tasks",
                impact="high" if item.critical_path else _tier(item.risk_level, 1.0, 0.5),
                mitigation="Consider parallel work streams, backup plans, or stakeholder escalation",
            )
        )
    for item in analysis.energy:
        factors.append(
            RiskFactor(
                type="resource",
                description=f"Energy risk: {item.pattern}",
                impact=_tier(item.energy_impact, 0.3, 0.1),
                mitigation=", ".join(item.solutions),
            )
        )
    return factors
