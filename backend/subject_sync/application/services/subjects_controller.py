"""List query, optimistic mutations and dialogs for the subjects screen."""

import logging

from subject_sync.application.interfaces import SubjectApi
from subject_sync.application.schemas.subject import (
    BulkDeleteResult,
    DeleteResult,
    ImportResult,
    SubjectCreate,
    SubjectUpdate,
)
from subject_sync.application.services.dialog_state import (
    CreateSubjectDialog,
    DeleteSubjectDialog,
    EditSubjectDialog,
)
from subject_sync.application.services.mutation_coordinator import OptimisticMutation
from subject_sync.application.services.query_cache import QueryCache
from subject_sync.application.services.query_keys import subjects_all_key, subjects_list_key
from subject_sync.application.services.subject_transforms import (
    PendingSubject,
    SubjectList,
    apply_update,
    commit_created,
    is_temp_id,
    prepend_placeholder,
    remove_subject,
    remove_subjects,
    replace_subject,
)
from subject_sync.config import get_settings
from subject_sync.domain.entities import MutationKind, MutationRecord, Subject

logger = logging.getLogger(__name__)


class SubjectsController:
    """Everything the subjects screen needs, bound to one cache and one API.

    Create, update and delete are optimistic: the cached list changes
    immediately and is restored exactly if the server rejects the change.
    Imports are not optimistic; they refetch every subjects list on success.
    """

    def __init__(
        self,
        api: SubjectApi,
        cache: QueryCache,
        *,
        count: int | None = None,
        stale_time: float | None = None,
        reconcile_on_settle: bool = False,
    ):
        settings = get_settings()
        self._api = api
        self._cache = cache
        self._count = count if count is not None else settings.subjects_list_count
        self._stale_time = stale_time if stale_time is not None else settings.subjects_stale_time
        self.query_key = subjects_list_key(self._count)
        keys = (self.query_key,)

        self.delete_mutation: OptimisticMutation[str, DeleteResult] = OptimisticMutation(
            cache,
            api.delete,
            kind=MutationKind.DELETE,
            query_keys=keys,
            apply_optimistic=remove_subject,
            target_id=lambda subject_id: subject_id,
            invalidate_on_settle=reconcile_on_settle,
        )
        self.update_mutation: OptimisticMutation[SubjectUpdate, Subject] = OptimisticMutation(
            cache,
            lambda patch: api.update(patch.id, patch),
            kind=MutationKind.UPDATE,
            query_keys=keys,
            apply_optimistic=apply_update,
            apply_result=lambda current, _patch, updated: replace_subject(current, updated),
            target_id=lambda patch: patch.id,
            invalidate_on_settle=reconcile_on_settle,
        )
        self.create_mutation: OptimisticMutation[PendingSubject, Subject] = OptimisticMutation(
            cache,
            lambda pending: api.create(pending.data),
            kind=MutationKind.CREATE,
            query_keys=keys,
            apply_optimistic=prepend_placeholder,
            apply_result=commit_created,
            invalidate_on_settle=reconcile_on_settle,
        )
        self.bulk_delete_mutation: OptimisticMutation[list[str], BulkDeleteResult] = OptimisticMutation(
            cache,
            api.delete_many,
            kind=MutationKind.BULK_DELETE,
            query_keys=keys,
            apply_optimistic=remove_subjects,
            invalidate_on_settle=reconcile_on_settle,
        )
        self.import_mutation: OptimisticMutation[list[SubjectCreate], ImportResult] = OptimisticMutation(
            cache,
            api.import_subjects,
            kind=MutationKind.IMPORT,
            on_success=self._on_import_success,
        )

        self.delete_dialog = DeleteSubjectDialog(self.delete_mutation)
        self.edit_dialog = EditSubjectDialog(self.update_mutation)
        self.create_dialog = CreateSubjectDialog(self.create_mutation)

    # ── Data ─────────────────────────────────────────────────────────

    @property
    def subjects(self) -> SubjectList | None:
        return self._cache.get(self.query_key)

    @property
    def is_fetching(self) -> bool:
        return self._cache.is_fetching(self.query_key)

    async def load(self, *, force: bool = False) -> SubjectList | None:
        """Fetch the list unless the cached copy is still fresh."""
        return await self._cache.fetch(
            self.query_key,
            self._fetch_subjects,
            stale_time=0.0 if force else self._stale_time,
        )

    async def _fetch_subjects(self) -> SubjectList:
        subjects = await self._api.list_subjects(self._count)
        return tuple(subjects)

    # ── Actions ──────────────────────────────────────────────────────

    def open_delete_dialog(self, subject: Subject) -> bool:
        if is_temp_id(subject.id):
            logger.debug("Ignoring delete of unsaved subject %s", subject.id)
            return False
        self.delete_dialog.show(subject)
        return True

    def open_edit_dialog(self, subject: Subject) -> bool:
        if is_temp_id(subject.id):
            logger.debug("Ignoring edit of unsaved subject %s", subject.id)
            return False
        self.edit_dialog.show(subject)
        return True

    def open_create_dialog(self) -> None:
        self.create_dialog.show()

    async def delete_many(self, subject_ids: list[str]) -> MutationRecord | None:
        if not subject_ids or self.bulk_delete_mutation.is_pending:
            return None
        return await self.bulk_delete_mutation.mutate(list(subject_ids))

    async def import_subjects(self, payloads: list[SubjectCreate]) -> MutationRecord:
        return await self.import_mutation.mutate(list(payloads))

    def _on_import_success(self, result: ImportResult, _payloads: list[SubjectCreate]) -> None:
        logger.info(
            "Imported subjects: created=%d skipped=%d failed=%d",
            result.created,
            result.skipped,
            result.failed,
        )
        self._cache.invalidate(subjects_all_key())
