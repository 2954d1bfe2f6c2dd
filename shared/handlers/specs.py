"""
Handler spec registry.

Each handler ("tool") is a capability the LLM may use when extracting
actions from a thought. Specs are plain data: the resolver reads their
primary tags and the prompt builder renders them for the model.
"""

from dataclasses import dataclass, field

from shared.exceptions import HandlerSpecNotFoundError

BASELINE_HANDLER_ID = "thoughts"

BASE_GUIDANCE = (
    "Only act when the thought clearly warrants the tool.",
    "Avoid inventing details that are not present in the thought.",
)


@dataclass(frozen=True)
class ActionSummary:
    """Condensed action shown inside a prompt example."""

    type: str
    data_summary: str | None = None
    confidence: int | None = None


@dataclass(frozen=True)
class HandlerExample:
    """Worked example included in the prompt."""

    thought: str
    rationale: str
    recommended_actions: tuple[ActionSummary, ...] = ()


@dataclass(frozen=True)
class HandlerSpec:
    """Description of one capability handler."""

    id: str
    title: str
    description: str
    primary_tags: tuple[str, ...]
    capabilities: tuple[str, ...]
    guidance: tuple[str, ...] = BASE_GUIDANCE
    positive_examples: tuple[HandlerExample, ...] = field(default_factory=tuple)
    negative_examples: tuple[HandlerExample, ...] = field(default_factory=tuple)


def _spec(
    handler_id: str,
    title: str,
    description: str,
    primary_tags: tuple[str, ...],
    capabilities: tuple[str, ...],
    guidance: tuple[str, ...] = (),
    positive_examples: tuple[HandlerExample, ...] = (),
    negative_examples: tuple[HandlerExample, ...] = (),
) -> HandlerSpec:
    return HandlerSpec(
        id=handler_id,
        title=title,
        description=description,
        primary_tags=primary_tags,
        capabilities=capabilities,
        guidance=BASE_GUIDANCE + guidance,
        positive_examples=positive_examples,
        negative_examples=negative_examples,
    )


HANDLER_SPECS: dict[str, HandlerSpec] = {
    spec.id: spec
    for spec in (
        _spec(
            "thoughts",
            "Thought Processing",
            "General purpose processing for everyday thoughts. Enhance clarity, add helpful "
            "tags, and surface actionable follow-ups.",
            ("processed",),
            ("enhancesContent", "addsTags", "createsEntries", "linksItems"),
            (
                "Favor suggestions (confidence 70-94) over auto actions unless the need is explicit.",
                "Only create tasks when the user asks to do something or there is a concrete next step.",
                "Add relationship tags only when a specific person is named.",
            ),
            positive_examples=(
                HandlerExample(
                    thought="Need to follow up with Priya about the onboarding project and "
                    "schedule design review.",
                    rationale="Clear next steps and a named collaborator.",
                    recommended_actions=(
                        ActionSummary("addTag", "tool-tasks"),
                        ActionSummary("createTask", "Follow up with Priya about onboarding", 85),
                    ),
                ),
            ),
            negative_examples=(
                HandlerExample(
                    thought="Priya was on my mind today.",
                    rationale="Too vague to create tasks or tags.",
                ),
            ),
        ),
        _spec(
            "tasks",
            "Tasks",
            "Manage todos, priorities, and progress in one place. Ideal for capturing next "
            "steps generated from thought processing.",
            ("tool-tasks",),
            ("createsEntries", "linksItems", "collectsMetrics"),
            (
                "Only create a task when timing, ownership, or a clear next step is present.",
                "Use mastery vs. pleasure categories to separate work from restorative activities.",
            ),
            positive_examples=(
                HandlerExample(
                    thought="Email Alex the revised onboarding checklist before Friday.",
                    rationale="Specific deliverable with a deadline and recipient.",
                    recommended_actions=(
                        ActionSummary("addTag", "tool-tasks", 96),
                        ActionSummary("createTask", "Email Alex onboarding checklist", 88),
                    ),
                ),
            ),
        ),
        _spec(
            "projects",
            "Projects",
            "Plan, group, and track related tasks or milestones. Ideal when a thought "
            "references a broader initiative.",
            ("tool-projects",),
            ("createsEntries", "linksItems", "addsTags"),
            (
                "Use projects when the thought references a multi-step effort rather than a single task.",
                "Prefer linking to existing projects before creating a new one.",
            ),
        ),
        _spec(
            "goals",
            "Goals",
            "Define personal or professional goals, align projects, and measure progress over time.",
            ("tool-goals",),
            ("createsEntries", "linksItems"),
            (
                "Only create a goal when the thought references an outcome over weeks or months.",
                "Link tasks and projects back to goals to keep execution aligned.",
            ),
        ),
        _spec(
            "focus",
            "Focus Sessions",
            "Run structured focus blocks, track streaks, and log outcomes for high-leverage work.",
            ("tool-focus",),
            ("collectsMetrics", "linksItems"),
            ("Use focus actions when the thought mentions carving out uninterrupted work time.",),
        ),
        _spec(
            "brainstorming",
            "Brainstorming",
            "Generate ideas, prompts, and new angles by chatting with an AI collaborator.",
            ("tool-brainstorming", "tool-brainstorm"),
            ("enhancesContent", "addsTags"),
            ("Use brainstorming when the thought explicitly asks for ideas or creative directions.",),
        ),
        _spec(
            "notes",
            "Notes",
            "Store evergreen knowledge, meeting notes, and references separated from "
            "action-oriented tools.",
            ("tool-notes",),
            ("enhancesContent", "addsTags", "linksItems"),
        ),
        _spec(
            "relationships",
            "Relationships",
            "Maintain relationship histories, energy levels, and follow-up reminders for "
            "people that matter.",
            ("tool-relationships",),
            ("addsTags", "linksItems"),
            (
                "Only link a person who is explicitly named in the thought.",
                "Person links are always offered as suggestions, never applied automatically.",
            ),
        ),
        _spec(
            "moodtracker",
            "Mood Tracker",
            "Record daily mood, triggers, and notes to understand emotional trends.",
            ("tool-mood",),
            ("collectsMetrics", "addsTags"),
            ("Offer mood entries as suggestions unless the user states a mood explicitly.",),
        ),
        _spec(
            "cbt",
            "CBT Processing",
            "Identify cognitive distortions, capture emotions, and guide the user through "
            "reframing negative thinking patterns.",
            ("cbt", "cbt-processed"),
            ("addsTags", "collectsMetrics", "enhancesContent"),
            ("Name the distortion only when the thought clearly shows one.",),
        ),
        _spec(
            "deepreflect",
            "Deep Reflect",
            "A space for long-form reflection, identity work, and existential exploration.",
            ("tool-deepreflect",),
            ("enhancesContent", "addsTags"),
        ),
        _spec(
            "errands",
            "Errands",
            "Manage short, location-based, or recurring errands separate from deep work tasks.",
            ("tool-errands",),
            ("createsEntries", "linksItems"),
        ),
        _spec(
            "packing-list",
            "Packing Planner",
            "Create smart packing lists tailored to trip type, destination, and length.",
            ("tool-packing",),
            ("createsEntries", "collectsMetrics"),
        ),
        _spec(
            "trips",
            "Trips",
            "Manage trip budgets, itineraries, and shared tasks across your travel plans.",
            ("tool-trips",),
            ("createsEntries", "linksItems", "collectsMetrics"),
        ),
        _spec(
            "investments",
            "Investments",
            "Stay on top of portfolio performance, allocation, and investment ideas.",
            ("tool-investments",),
            ("collectsMetrics", "linksItems"),
        ),
        _spec(
            "spending",
            "Spending Tracker",
            "Upload credit card and bank statements, analyze spending patterns, and get "
            "personalized financial insights.",
            ("tool-spending",),
            ("collectsMetrics", "linksItems"),
        ),
        _spec(
            "subscriptions",
            "Subscriptions",
            "Track trials, renewals, and recurring expenses to avoid surprises.",
            ("tool-subscriptions",),
            ("createsEntries", "collectsMetrics"),
        ),
        _spec(
            "asset-horizon",
            "Asset Horizon",
            "Model investment growth scenarios, retirement horizons, and savings milestones.",
            ("tool-asset-horizon",),
            ("collectsMetrics", "linksItems"),
        ),
    )
}


def get_handler_spec_by_id(handler_id: str) -> HandlerSpec:
    """
    Look up a handler spec.

    Args:
        handler_id: Handler id

    Returns:
        HandlerSpec

    Raises:
        HandlerSpecNotFoundError: If no spec is registered under the id
    """
    spec = HANDLER_SPECS.get(handler_id)
    if spec is None:
        raise HandlerSpecNotFoundError(handler_id)
    return spec


def is_known_handler(handler_id: str) -> bool:
    """Whether a handler id is registered."""
    return handler_id in HANDLER_SPECS


def _render_examples(examples: tuple[HandlerExample, ...], label: str) -> str:
    rendered = []
    for index, example in enumerate(examples, start=1):
        lines = [f"{label} {index}", f'Thought: "{example.thought}"', f"Rationale: {example.rationale}"]
        if example.recommended_actions:
            actions = []
            for action in example.recommended_actions:
                text = action.type
                if action.data_summary:
                    text += f" - {action.data_summary}"
                if action.confidence:
                    text += f" (confidence {action.confidence})"
                actions.append(text)
            lines.append(f"Suggested actions: {'; '.join(actions)}")
        rendered.append("\n".join(lines))
    return "\n\n".join(rendered)


def render_handler_spec_for_prompt(spec: HandlerSpec) -> str:
    """Render one spec as a prompt section."""
    guidance = "\n".join(f"{index}. {item}" for index, item in enumerate(spec.guidance, start=1))
    sections = [
        f"Tool: {spec.title} ({spec.id})",
        f"Description: {spec.description}",
        f"Primary tags: {', '.join(spec.primary_tags)}",
        f"Capabilities: {', '.join(spec.capabilities)}",
        "Guidance:",
        guidance,
        _render_examples(spec.positive_examples, "Positive example"),
        _render_examples(spec.negative_examples, "Negative example"),
    ]
    return "\n\n".join(section for section in sections if section)


def render_handler_specs_for_prompt(specs: list[HandlerSpec]) -> str:
    """Render several specs separated by horizontal rules."""
    return "\n\n---\n\n".join(render_handler_spec_for_prompt(spec) for spec in specs)
