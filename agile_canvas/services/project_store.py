"""Project store - sole mutator of the project collection.

Every mutating operation works on a single project, recomputes derived
fields where tasks change, appends exactly one history entry and then writes
the whole collection through the storage collaborator. Operations addressed
to an unknown project, task or risk id leave the collection untouched and
return ``None``.
"""
import logging
from typing import Any, Callable, Optional

from agile_canvas.models.activity import (
    DEFAULT_AUTHOR,
    SYSTEM_ACTOR,
    Comment,
    FileCreate,
    HistoryEntry,
    ProjectFile,
)
from agile_canvas.models.project import (
    Currency,
    Project,
    ProjectCreate,
    ProjectPhase,
    ProjectStatus,
    ProjectUpdate,
)
from agile_canvas.models.risk import Risk, RiskCreate, RiskUpdate
from agile_canvas.models.task import Task, TaskUpdate
from agile_canvas.services.analytics import filter_projects
from agile_canvas.storage import ProjectStorage


logger = logging.getLogger(__name__)


def compute_progress(tasks: list[Task]) -> int:
    """
    Percentage of completed tasks, rounded half up.

    Uses integer arithmetic so that exact halves (e.g. 1 of 8 = 12.5%)
    always round up.

    Examples:
        >>> compute_progress([])
        0
    """
    total = len(tasks)
    if total == 0:
        return 0
    completed = sum(1 for task in tasks if task.completed)
    return (200 * completed + total) // (2 * total)


class ProjectStore:
    """In-memory project collection with write-through persistence."""

    def __init__(self, storage: ProjectStorage, default_currency: Currency = Currency.BRL):
        """
        Initialize the store from storage.

        Args:
            storage: Persistence collaborator; loaded once here
            default_currency: Currency for projects created without one
        """
        self.storage = storage
        self.default_currency = default_currency
        self._projects: list[Project] = storage.load()
        logger.info("Loaded %d projects", len(self._projects))

    # Reads

    @property
    def projects(self) -> list[Project]:
        """Snapshot of the collection; mutating it does not affect the store."""
        return [project.model_copy(deep=True) for project in self._projects]

    def get_project(self, project_id: str) -> Optional[Project]:
        """Get a project by id, or None if unknown."""
        index = self._index_of(project_id)
        if index is None:
            return None
        return self._projects[index].model_copy(deep=True)

    def list_projects(self, **filters: Any) -> list[Project]:
        """List projects, optionally filtered (see ``analytics.filter_projects``)."""
        return filter_projects(self.projects, **filters)

    def __len__(self) -> int:
        return len(self._projects)

    # Project operations

    def create_project(self, project_create: ProjectCreate) -> Project:
        """
        Create a new project.

        Required fields are the caller's responsibility; optional ones get
        creation defaults here.

        Args:
            project_create: Project creation data

        Returns:
            Created project with a fresh id, zero progress, empty owned
            collections and one "Project created" history entry
        """
        project = Project(
            name=project_create.name,
            client=project_create.client,
            description=project_create.description,
            status=project_create.status or ProjectStatus.IN_PROGRESS,
            phase=project_create.phase or ProjectPhase.INITIATION,
            start_date=project_create.start_date,
            end_date=project_create.end_date,
            tags=list(project_create.tags or []),
            team=list(project_create.team or []),
            initial_value=project_create.initial_value or 0,
            final_value=project_create.final_value or 0,
            currency=project_create.currency or self.default_currency,
        )
        project.history.append(HistoryEntry(
            action="Project created",
            details=f'Project "{project.name}" was created',
        ))

        self._projects.append(project)
        self._persist()

        logger.info("Created project '%s' (ID: %s)", project.name, project.id)
        return project.model_copy(deep=True)

    def update_project(self, project_id: str, project_update: ProjectUpdate) -> Optional[Project]:
        """
        Apply a partial update to a project.

        Only fields present in the patch change. Progress is not recomputed.
        Setting ``status=deleted`` is a soft delete: all data is kept.

        Args:
            project_id: Project id
            project_update: Update data

        Returns:
            Updated project, or None if the project is unknown
        """
        changes = project_update.model_dump(exclude_none=True)

        def apply(project: Project) -> Project:
            updated = project.model_copy(update=changes)
            changed = ", ".join(changes) if changes else "no fields"
            return self._with_history(
                updated,
                "Project updated",
                f'Project "{updated.name}" was modified ({changed})',
            )

        return self._mutate(project_id, apply)

    def delete_project(self, project_id: str) -> bool:
        """
        Permanently remove a project and everything it owns.

        Args:
            project_id: Project id

        Returns:
            True if a project was removed, False if the id was unknown
        """
        index = self._index_of(project_id)
        if index is None:
            logger.debug("Delete ignored, unknown project %s", project_id)
            return False

        removed = self._projects.pop(index)
        self._persist()

        logger.info("Purged project '%s' (ID: %s)", removed.name, removed.id)
        return True

    # Task operations

    def add_task(self, project_id: str, title: str) -> Optional[Task]:
        """
        Append an open task and recompute progress.

        Adding the same title twice creates two tasks.

        Returns:
            Created task, or None if the project is unknown
        """
        task = Task(title=title)

        def apply(project: Project) -> Project:
            tasks = [*project.tasks, task]
            updated = project.model_copy(update={
                "tasks": tasks,
                "progress": compute_progress(tasks),
            })
            return self._with_history(updated, "Task added", f'New task: "{title}"')

        if self._mutate(project_id, apply) is None:
            return None
        return task.model_copy()

    def toggle_task(self, project_id: str, task_id: str) -> Optional[Task]:
        """
        Flip the completed flag of one task and recompute progress.

        Returns:
            Toggled task, or None if the project or task is unknown
        """
        project = self._find(project_id)
        task = self._find_task(project, task_id) if project is not None else None
        if task is None:
            logger.debug("Toggle ignored, unknown task %s/%s", project_id, task_id)
            return None

        toggled = task.model_copy(update={"completed": not task.completed})
        outcome = "completed" if toggled.completed else "reopened"
        self._mutate(project_id, lambda p: self._replace_task(
            p, toggled, f'Task "{task.title}" {outcome}',
        ))
        return toggled.model_copy()

    def update_task(self, project_id: str, task_id: str, task_update: TaskUpdate) -> Optional[Task]:
        """
        Rename a task and/or set its completed flag, recomputing progress.

        Returns:
            Updated task, or None if the project or task is unknown
        """
        project = self._find(project_id)
        task = self._find_task(project, task_id) if project is not None else None
        if task is None:
            logger.debug("Task update ignored, unknown task %s/%s", project_id, task_id)
            return None

        updated = task.model_copy(update=task_update.model_dump(exclude_none=True))
        self._mutate(project_id, lambda p: self._replace_task(
            p, updated, f'Task "{task.title}" was modified',
        ))
        return updated.model_copy()

    # Comments, risks and files

    def add_comment(self, project_id: str, text: str, author: str = DEFAULT_AUTHOR) -> Optional[Comment]:
        """
        Append a comment to a project.

        Raises:
            ValueError: If text is empty or whitespace only
        """
        if not text or not text.strip():
            raise ValueError("Comment text must not be empty")

        comment = Comment(author=author, text=text)

        def apply(project: Project) -> Project:
            updated = project.model_copy(update={"comments": [*project.comments, comment]})
            return self._with_history(updated, "Comment added", f"New comment by {author}")

        if self._mutate(project_id, apply) is None:
            return None
        return comment.model_copy()

    def add_risk(self, project_id: str, risk_create: RiskCreate) -> Optional[Risk]:
        """Register a risk on a project."""
        risk = Risk(**risk_create.model_dump())

        def apply(project: Project) -> Project:
            updated = project.model_copy(update={"risks": [*project.risks, risk]})
            return self._with_history(updated, "Risk added", f'New risk: "{risk.name}"')

        if self._mutate(project_id, apply) is None:
            return None
        return risk.model_copy()

    def update_risk(self, project_id: str, risk_id: str, risk_update: RiskUpdate) -> Optional[Risk]:
        """
        Merge fields into one risk, most often a status transition.

        Returns:
            Updated risk, or None if the project or risk is unknown
        """
        project = self._find(project_id)
        risk = next((r for r in project.risks if r.id == risk_id), None) if project is not None else None
        if risk is None:
            logger.debug("Risk update ignored, unknown risk %s/%s", project_id, risk_id)
            return None

        updated_risk = risk.model_copy(update=risk_update.model_dump(exclude_none=True))

        def apply(p: Project) -> Project:
            risks = [updated_risk if r.id == risk_id else r for r in p.risks]
            updated = p.model_copy(update={"risks": risks})
            return self._with_history(updated, "Risk updated", f'Risk "{risk.name}" was modified')

        self._mutate(project_id, apply)
        return updated_risk.model_copy()

    def add_file(self, project_id: str, file_create: FileCreate) -> Optional[ProjectFile]:
        """Attach file metadata to a project."""
        project_file = ProjectFile(**file_create.model_dump())

        def apply(project: Project) -> Project:
            updated = project.model_copy(update={"files": [*project.files, project_file]})
            return self._with_history(updated, "File added", f'File "{project_file.name}" attached')

        if self._mutate(project_id, apply) is None:
            return None
        return project_file.model_copy()

    # Helpers

    def _index_of(self, project_id: str) -> Optional[int]:
        for index, project in enumerate(self._projects):
            if project.id == project_id:
                return index
        return None

    def _find(self, project_id: str) -> Optional[Project]:
        index = self._index_of(project_id)
        return self._projects[index] if index is not None else None

    @staticmethod
    def _find_task(project: Project, task_id: str) -> Optional[Task]:
        return next((task for task in project.tasks if task.id == task_id), None)

    def _replace_task(self, project: Project, task: Task, details: str) -> Project:
        tasks = [task if t.id == task.id else t for t in project.tasks]
        updated = project.model_copy(update={
            "tasks": tasks,
            "progress": compute_progress(tasks),
        })
        return self._with_history(updated, "Task updated", details)

    @staticmethod
    def _with_history(project: Project, action: str, details: str) -> Project:
        entry = HistoryEntry(action=action, details=details, actor=SYSTEM_ACTOR)
        return project.model_copy(update={"history": [*project.history, entry]})

    def _mutate(self, project_id: str, apply: Callable[[Project], Project]) -> Optional[Project]:
        """Replace one project with ``apply(project)`` and persist."""
        index = self._index_of(project_id)
        if index is None:
            logger.debug("Mutation ignored, unknown project %s", project_id)
            return None

        updated = apply(self._projects[index])
        self._projects[index] = updated
        self._persist()

        logger.info("Project %s: %s", project_id, updated.history[-1].action)
        return updated.model_copy(deep=True)

    def _persist(self) -> None:
        self.storage.save(list(self._projects))

