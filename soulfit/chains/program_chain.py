"""Pilates program generation client.

Two strategies sit behind ``ProgramGenerator.generate``:

* ``two_phase`` -- a LangGraph graph ``analyze -> design``. Phase one turns
  the posture analysis, health data and goals into a ComprehensiveAnalysis;
  phase two designs the full program with exercise text inline.
* ``single_phase`` -- one request that sees an equipment-filtered exercise
  catalog and answers with catalog identifiers, which are expanded back
  into exercises here.

Either way every exercise must carry a non-empty ``reasoning``; a reply
that does not is rejected rather than shown as a prescription.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import TypedDict

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langgraph.graph import END, StateGraph
from pydantic import BaseModel

from .. import config
from ..errors import NoExercisesAvailable, ResponseShapeError, SoulFitError, ValidationError
from ..llm.dedalus_chat_model import DedalusChatModel
from ..schemas.goals import EQUIPMENT_CATALOG
from ..schemas.program import (
    AdditionalCatalogExercises,
    AdditionalExercises,
    CatalogProgramSelection,
    ComprehensiveAnalysis,
    Exercise,
    GeneratedProgram,
    GenerateProgramRequest,
    ProgramDraft,
    SelectedExercise,
)
from ..services.catalog import CatalogEntry, ExerciseResolver, filter_by_equipment, load_catalog
from .structured import invoke_model, json_schema_format, language_instruction, parse_structured

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to generate Pilates program"
MORE_FAILURE_MESSAGE = "Failed to generate additional exercises"

PHASE_ANALYSIS = "Phase 1 Analysis"
PHASE_DESIGN = "Phase 2 Design"

UNKNOWN_EQUIPMENT = "Unknown"

ANALYST_SYSTEM_PROMPT = """\
You are an expert Pilates instructor, movement specialist, and health analyst. \
Analyze all provided health and posture data to create a comprehensive \
assessment that will guide program design."""

ANALYSIS_PROMPT = """\
Perform a comprehensive analysis of this person's health and movement profile:

{context}

Please provide a detailed analysis that identifies:
1. Primary movement dysfunctions and imbalances
2. Key health metrics that impact exercise selection
3. Risk factors and contraindications
4. Priority areas for improvement
5. Optimal exercise strategies based on their body composition and goals
6. Specific Pilates principles that would benefit this individual most

{language}"""

DESIGN_PROMPT = """\
As an expert Pilates instructor, create a {duration}-minute exercise program \
based on this data:

ANALYSIS:
{analysis}

USER GOALS:
- Primary Goal: {primary_goal}
- Experience: {experience_level}
- Focus Areas: {focus_areas}
- Limitations: {limitations}
- Available Time: {duration} minutes

AVAILABLE EQUIPMENT: {equipment}

Create a program with warm-up, main workout and cool-down exercises using only \
the available equipment. Each exercise must include name, description, duration \
(minutes), repetitions, target areas, difficulty (easy, medium or hard), \
modifications and reasoning: why this exercise was chosen, connecting the \
assessment findings to the user's goals. {language}"""

CATALOG_PROMPT = """\
As an expert Pilates instructor, create a {duration}-minute exercise program \
for this person.

{context}

CANDIDATE EXERCISES (choose only from these, refer to them by id):
{candidates}

Return a warm-up, main workout and cool-down. For every exercise give the \
catalog id in exercise_id, its duration in minutes, repetitions, sets where \
relevant, modifications, and reasoning: why this exercise was chosen for this \
person. Also return a comprehensive analysis of their movement and health, the \
overall reasoning, targeted issues, expected outcomes and progression tips. \
{language}"""

MORE_PROMPT = """\
The person below already has a Pilates program. Suggest additional main-workout \
exercises that complement it without repeating any of these: {existing}.

{context}

{source}

Every exercise must include reasoning explaining why it was chosen. {language}"""

ANALYSIS_TEMPLATE = ChatPromptTemplate.from_messages(
    [("system", ANALYST_SYSTEM_PROMPT), ("human", ANALYSIS_PROMPT)]
)
DESIGN_TEMPLATE = ChatPromptTemplate.from_messages([("human", DESIGN_PROMPT)])
CATALOG_TEMPLATE = ChatPromptTemplate.from_messages([("human", CATALOG_PROMPT)])
MORE_TEMPLATE = ChatPromptTemplate.from_messages([("human", MORE_PROMPT)])


class TwoPhaseState(TypedDict):
    request: GenerateProgramRequest
    analysis: ComprehensiveAnalysis | None
    draft: ProgramDraft | None


def format_context(request: GenerateProgramRequest) -> str:
    recommendations = ", ".join(request.recommendations) or "None"
    health = request.health_assessment.model_dump(
        by_alias=True, exclude_none=True, exclude={"report_image"}
    )
    goals = request.user_goals.model_dump(by_alias=True, exclude_none=True)
    equipment = ", ".join(request.selected_equipment) or "Not specified"
    return (
        f"POSTURE ANALYSIS RESULTS:\n{request.posture_analysis}\n\n"
        f"POSTURE RECOMMENDATIONS:\n{recommendations}\n\n"
        f"HEALTH ASSESSMENT DATA:\n{json.dumps(health, indent=2, ensure_ascii=False)}\n\n"
        f"USER GOALS & PREFERENCES:\n{json.dumps(goals, indent=2, ensure_ascii=False)}\n\n"
        f"AVAILABLE EQUIPMENT: {equipment}"
    )


def format_candidates(candidates: list[CatalogEntry]) -> str:
    return "\n".join(
        f"- {e.id}: {e.name} [{e.equipment}, {e.difficulty}] targets {', '.join(e.target_areas)}"
        for e in candidates
    )


def new_program_id() -> str:
    return f"program_{int(time.time() * 1000)}"


class ProgramGenerator:
    """Generate Pilates programs with the configured strategy.

    Args:
        llm: Chat model to use for every phase. When omitted, a
            DedalusChatModel with a matching JSON schema is built per call.
        strategy: ``two_phase`` or ``single_phase``.
        require_equipment: Reject requests with no selected equipment.
        reject_unresolved: In ``single_phase``, reject the whole program when
            any returned identifier is not in the catalog instead of emitting
            an ``Unknown`` placeholder.
        phase_delay: Seconds to wait between the two phases.
        catalog: Exercise catalog; defaults to the bundled one.
    """

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        strategy: str | None = None,
        require_equipment: bool | None = None,
        reject_unresolved: bool | None = None,
        phase_delay: float | None = None,
        catalog: list[CatalogEntry] | None = None,
    ) -> None:
        self.llm = llm
        self.strategy = strategy or config.GENERATION_STRATEGY
        if self.strategy not in ("two_phase", "single_phase"):
            raise ValueError(f"Unknown generation strategy: {self.strategy}")
        self.require_equipment = (
            config.REQUIRE_EQUIPMENT if require_equipment is None else require_equipment
        )
        self.reject_unresolved = (
            config.REJECT_UNRESOLVED_EXERCISES if reject_unresolved is None else reject_unresolved
        )
        self.phase_delay = config.PHASE_DELAY_SECONDS if phase_delay is None else phase_delay
        self._catalog = catalog
        self._graph = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(self, request: GenerateProgramRequest) -> GeneratedProgram:
        """Generate a full program.

        Raises ValidationError/NoExercisesAvailable before any model call,
        and ServiceCallError/ResponseShapeError when the model call fails or
        the reply is unusable.
        """
        self.validate(request)
        logger.info(
            "Generating program (%s): analysis=%d chars, recommendations=%d, goal=%s, equipment=%s",
            self.strategy,
            len(request.posture_analysis or ""),
            len(request.recommendations),
            request.user_goals.primary_goal,
            request.selected_equipment,
        )
        if self.strategy == "single_phase":
            candidates = self.candidates(request)
            return await self._generate_from_catalog(request, candidates)
        return await self._generate_two_phase(request)

    async def generate_more(
        self,
        request: GenerateProgramRequest,
        existing: GeneratedProgram | None = None,
    ) -> list[Exercise]:
        """Generate additional main-workout exercises only.

        The caller appends them to the existing program.
        """
        self.validate(request)
        existing_names = [e.name for e in existing.all_exercises()] if existing else []
        context = format_context(request)
        if existing is not None:
            context += "\n\nCURRENT ANALYSIS:\n" + existing.comprehensive_analysis.model_dump_json(indent=2)

        if self.strategy == "single_phase":
            candidates = self.candidates(request)
            messages = MORE_TEMPLATE.format_messages(
                existing=", ".join(existing_names) or "none",
                context=context,
                source="CANDIDATE EXERCISES (refer to them by id):\n" + format_candidates(candidates),
                language=language_instruction(),
            )
            content = await invoke_model(
                self._llm("additional_exercises", AdditionalCatalogExercises),
                messages,
                MORE_FAILURE_MESSAGE,
            )
            selection = parse_structured(content, AdditionalCatalogExercises, MORE_FAILURE_MESSAGE)
            exercises, _ = self._expand(selection.main_workout, ExerciseResolver(candidates))
        else:
            messages = MORE_TEMPLATE.format_messages(
                existing=", ".join(existing_names) or "none",
                context=context,
                source=f"AVAILABLE EQUIPMENT: {', '.join(request.selected_equipment) or 'Mat'}",
                language=language_instruction(),
            )
            content = await invoke_model(
                self._llm("additional_exercises", AdditionalExercises),
                messages,
                MORE_FAILURE_MESSAGE,
            )
            exercises = parse_structured(content, AdditionalExercises, MORE_FAILURE_MESSAGE).main_workout

        logger.info("Generated %d additional exercises", len(exercises))
        return exercises

    def validate(self, request: GenerateProgramRequest) -> None:
        if not (request.posture_analysis or "").strip():
            raise ValidationError("Posture analysis is required")
        if self.require_equipment and not request.selected_equipment:
            raise ValidationError("Please select at least one piece of equipment")
        unknown = [e for e in request.selected_equipment if e not in EQUIPMENT_CATALOG]
        if unknown:
            raise ValidationError("Unknown equipment", details=", ".join(unknown))

    def candidates(self, request: GenerateProgramRequest) -> list[CatalogEntry]:
        catalog = self._catalog if self._catalog is not None else load_catalog()
        if not request.selected_equipment:
            return list(catalog)
        candidates = filter_by_equipment(catalog, request.selected_equipment)
        if not candidates:
            raise NoExercisesAvailable(details=", ".join(request.selected_equipment))
        return candidates

    # ------------------------------------------------------------------
    # Two-phase
    # ------------------------------------------------------------------

    def build_graph(self) -> StateGraph:
        """Build the two-phase graph: analyze -> design -> END."""
        graph = StateGraph(TwoPhaseState)
        graph.add_node("analyze", self._analyze_node)
        graph.add_node("design", self._design_node)
        graph.set_entry_point("analyze")
        graph.add_edge("analyze", "design")
        graph.add_edge("design", END)
        return graph

    async def _generate_two_phase(self, request: GenerateProgramRequest) -> GeneratedProgram:
        if self._graph is None:
            self._graph = self.build_graph().compile()
        result = await self._graph.ainvoke({"request": request, "analysis": None, "draft": None})
        program = self.accept(result["draft"], result["analysis"], strategy="two_phase")
        logger.info("Two-phase program generation completed: %s", program.id)
        return program

    async def _analyze_node(self, state: TwoPhaseState) -> dict:
        logger.info("Phase 1: analyzing posture and health data")
        messages = ANALYSIS_TEMPLATE.format_messages(
            context=format_context(state["request"]),
            language=language_instruction(),
        )
        try:
            content = await invoke_model(
                self._llm("comprehensive_analysis", ComprehensiveAnalysis), messages, FAILURE_MESSAGE
            )
            analysis = parse_structured(content, ComprehensiveAnalysis, FAILURE_MESSAGE)
        except SoulFitError as e:
            e.phase = PHASE_ANALYSIS
            raise
        logger.info("Phase 1 complete")

        if self.phase_delay > 0:
            await asyncio.sleep(self.phase_delay)
        return {"analysis": analysis}

    async def _design_node(self, state: TwoPhaseState) -> dict:
        logger.info("Phase 2: designing program from analysis and goals")
        request = state["request"]
        goals = request.user_goals
        messages = DESIGN_TEMPLATE.format_messages(
            duration=config.PROGRAM_DURATION_MINUTES,
            analysis=state["analysis"].model_dump_json(indent=2),
            primary_goal=goals.primary_goal,
            experience_level=goals.experience_level,
            focus_areas=", ".join(goals.focus_areas) or "None",
            limitations=", ".join(goals.limitations) or "None",
            equipment=", ".join(request.selected_equipment) or "Mat",
            language=language_instruction(),
        )
        try:
            content = await invoke_model(
                self._llm("pilates_program", ProgramDraft), messages, FAILURE_MESSAGE
            )
            draft = parse_structured(content, ProgramDraft, FAILURE_MESSAGE)
        except SoulFitError as e:
            e.phase = PHASE_DESIGN
            raise
        logger.info(
            "Phase 2 complete: warm_up=%d main=%d cool_down=%d",
            len(draft.warm_up),
            len(draft.main_workout),
            len(draft.cool_down),
        )
        return {"draft": draft}

    # ------------------------------------------------------------------
    # Single-phase
    # ------------------------------------------------------------------

    async def _generate_from_catalog(
        self, request: GenerateProgramRequest, candidates: list[CatalogEntry]
    ) -> GeneratedProgram:
        messages = CATALOG_TEMPLATE.format_messages(
            duration=config.PROGRAM_DURATION_MINUTES,
            context=format_context(request),
            candidates=format_candidates(candidates),
            language=language_instruction(),
        )
        content = await invoke_model(
            self._llm("pilates_program", CatalogProgramSelection),
            messages,
            FAILURE_MESSAGE,
        )
        selection = parse_structured(content, CatalogProgramSelection, FAILURE_MESSAGE)

        resolver = ExerciseResolver(candidates)
        warm_up, unresolved_warm = self._expand(selection.warm_up, resolver)
        main, unresolved_main = self._expand(selection.main_workout, resolver)
        cool_down, unresolved_cool = self._expand(selection.cool_down, resolver)
        unresolved = unresolved_warm + unresolved_main + unresolved_cool

        draft = ProgramDraft(
            title=selection.title,
            duration=selection.duration,
            warm_up=warm_up,
            main_workout=main,
            cool_down=cool_down,
            reasoning=selection.reasoning,
            targeted_issues=selection.targeted_issues,
            expected_outcomes=selection.expected_outcomes,
            progression_tips=selection.progression_tips,
        )
        program = self.accept(
            draft, selection.comprehensive_analysis, strategy="single_phase", unresolved=unresolved
        )
        logger.info("Single-phase program generation completed: %s", program.id)
        return program

    def _expand(
        self, selected: list[SelectedExercise], resolver: ExerciseResolver
    ) -> tuple[list[Exercise], list[str]]:
        exercises: list[Exercise] = []
        unresolved: list[str] = []
        for item in selected:
            entry = resolver.resolve(item.exercise_id)
            if entry is None:
                logger.warning("Unresolved exercise identifier %r, using placeholder", item.exercise_id)
                unresolved.append(item.exercise_id)
                exercises.append(
                    Exercise(
                        name=item.exercise_id,
                        duration=item.duration,
                        repetitions=item.repetitions,
                        sets=item.sets,
                        modifications=item.modifications,
                        equipment=[UNKNOWN_EQUIPMENT],
                        reasoning=item.reasoning,
                    )
                )
                continue
            exercises.append(
                Exercise(
                    name=entry.name,
                    description=entry.description,
                    duration=item.duration,
                    repetitions=item.repetitions,
                    sets=item.sets,
                    modifications=item.modifications,
                    target_areas=entry.target_areas,
                    difficulty=entry.difficulty,
                    equipment=[entry.equipment],
                    reasoning=item.reasoning,
                )
            )
        if unresolved and self.reject_unresolved:
            raise ResponseShapeError(
                FAILURE_MESSAGE,
                details=f"Unknown exercise identifiers: {', '.join(unresolved)}",
            )
        return exercises, unresolved

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def accept(
        self,
        draft: ProgramDraft,
        analysis: ComprehensiveAnalysis,
        strategy: str,
        unresolved: list[str] | None = None,
    ) -> GeneratedProgram:
        """Stamp an id and creation time on a draft and embed its analysis."""
        return GeneratedProgram(
            **draft.model_dump(exclude={"id"}),
            id=draft.id or new_program_id(),
            total_exercises=len(draft.warm_up) + len(draft.main_workout) + len(draft.cool_down),
            comprehensive_analysis=analysis,
            created_at=datetime.now(timezone.utc),
            strategy=strategy,
            unresolved_exercises=unresolved or [],
        )

    def _llm(self, schema_name: str, schema: type[BaseModel]) -> BaseChatModel:
        if self.llm is not None:
            return self.llm
        return DedalusChatModel(
            max_tokens=config.GENERATION_MAX_TOKENS,
            response_format=json_schema_format(schema_name, schema),
        )
