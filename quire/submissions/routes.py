# =============================================================================
# Submission API Routes
# =============================================================================
#
# Endpoints:
#   GET    /api/submissions                 - List, paged (all for reviewers, own otherwise)
#   POST   /api/submissions                 - Submit a manuscript
#   GET    /api/submissions/{id}            - Read         (owner, editor, admin)
#   DELETE /api/submissions/{id}            - Withdraw     (owner, editor, admin)
#   PUT    /api/submissions/{id}/file       - Upload file  (owner, editor, admin)
#   GET    /api/submissions/{id}/file       - Download     (owner, editor, admin)
#   PUT    /api/submissions/{id}/review     - Decide       (editor, admin)
#   POST   /api/submissions/{id}/comments   - Comment      (editor, admin)
#
# Reviewers (editors and admins) see `file` and `reviewerInfo`; authors
# don't, even on their own submissions.
#
# =============================================================================

from __future__ import annotations

import logging
import mimetypes
import re
from typing import Any

from fastapi import APIRouter, Body, Depends, File, Response, UploadFile
from pydantic import BaseModel

from quire.api.deps import Page, get_page, get_storage
from quire.auth.access import AuthTier, is_reviewer
from quire.auth.policies import authorize, require, require_auth
from quire.core.models import Comment, Decision, Identity, Recommendation, Submission
from quire.core.utils import generate_id, utc_now
from quire.errors import NotFoundError, ValidationError
from quire.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

REQUIRED_FIELDS = ("title", "publication")


# =============================================================================
# Request Models
# =============================================================================


class ReviewRequest(BaseModel):
    decision: Decision | None = None
    recommendation: Recommendation | None = None


class CommentRequest(BaseModel):
    text: str


# =============================================================================
# Helpers
# =============================================================================


async def _load(storage: StorageProvider, submission_id: str) -> Submission:
    doc = await storage.documents.get(Collections.SUBMISSIONS, submission_id)
    if not doc:
        raise NotFoundError("No document with that ID")
    return Submission.model_validate(doc)


async def _save(storage: StorageProvider, submission: Submission) -> None:
    await storage.documents.save(Collections.SUBMISSIONS, submission.id, submission.model_dump())


def _blob_key(submission_id: str, filename: str | None) -> str:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "manuscript").strip("._") or "manuscript"
    return f"submissions/{submission_id}/{generate_id()}-{safe}"


# =============================================================================
# Endpoints
# =============================================================================


@router.get("")
async def list_submissions(
    identity: Identity = Depends(require_auth),
    page: Page = Depends(get_page),
    storage: StorageProvider = Depends(get_storage),
):
    """One page of submissions, in store order. Defaults to the first 100."""
    reviewer = is_reviewer(identity)
    filters = None if reviewer else {"author_id": identity.id}

    docs = await storage.documents.query(Collections.SUBMISSIONS, filters, limit=page.limit, offset=page.offset)
    return [Submission.model_validate(doc).serialize(reviewer) for doc in docs]


@router.post("", status_code=201)
async def create_submission(
    body: dict[str, Any] | None = Body(default=None),
    identity: Identity = Depends(require_auth),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Submit a manuscript.

    Author name and id come from the token, never from the body. The
    manuscript itself goes through the upload endpoint; a `file` value in
    the body is ignored so clients can't point at someone else's blob.
    """
    body = body or {}
    missing = next((field for field in REQUIRED_FIELDS if field not in body), None)
    if missing:
        raise ValidationError("Missing field", location=missing)

    for field in REQUIRED_FIELDS:
        if field in body and not isinstance(body[field], str):
            raise ValidationError("Incorrect field type: expected string", location=field)

    submission = Submission(
        title=body["title"],
        publication=body["publication"],
        author=identity.display_name,
        author_id=identity.id,
    )
    await _save(storage, submission)

    logger.info(f"Submission {submission.id} created by {identity.id}")
    return submission.serialize(is_reviewer(identity))


@router.get("/{submission_id}")
async def get_submission(
    submission_id: str,
    identity: Identity = Depends(require_auth),
    storage: StorageProvider = Depends(get_storage),
):
    submission = await _load(storage, submission_id)
    authorize(identity, submission.author_id, AuthTier.OWNER_OR_EDITOR_OR_ADMIN)
    return submission.serialize(is_reviewer(identity))


@router.delete("/{submission_id}", status_code=204)
async def delete_submission(
    submission_id: str,
    identity: Identity = Depends(require_auth),
    storage: StorageProvider = Depends(get_storage),
):
    submission = await _load(storage, submission_id)
    authorize(identity, submission.author_id, AuthTier.OWNER_OR_EDITOR_OR_ADMIN)

    if submission.file:
        await storage.blobs.delete(submission.file)
    await storage.documents.delete(Collections.SUBMISSIONS, submission_id)

    logger.info(f"Submission {submission_id} deleted by {identity.id}")
    return Response(status_code=204)


# =============================================================================
# Manuscript files
# =============================================================================


@router.put("/{submission_id}/file")
async def upload_file(
    submission_id: str,
    upload: UploadFile = File(...),
    identity: Identity = Depends(require_auth),
    storage: StorageProvider = Depends(get_storage),
):
    submission = await _load(storage, submission_id)
    authorize(identity, submission.author_id, AuthTier.OWNER_OR_EDITOR_OR_ADMIN)

    data = await upload.read()
    if not data:
        raise ValidationError("Uploaded file is empty", location="upload")

    key = _blob_key(submission.id, upload.filename)
    content_type = upload.content_type or "application/octet-stream"
    await storage.blobs.put(key, data, content_type)

    previous = submission.file
    submission.file = key
    await _save(storage, submission)

    if previous and previous != key:
        await storage.blobs.delete(previous)

    return submission.serialize(is_reviewer(identity))


@router.get("/{submission_id}/file")
async def download_file(
    submission_id: str,
    identity: Identity = Depends(require_auth),
    storage: StorageProvider = Depends(get_storage),
):
    submission = await _load(storage, submission_id)
    authorize(identity, submission.author_id, AuthTier.OWNER_OR_EDITOR_OR_ADMIN)

    if not submission.file:
        raise NotFoundError("Submission has no file")
    try:
        data = await storage.blobs.get(submission.file)
    except FileNotFoundError:
        raise NotFoundError("Submission file is missing")

    media_type = mimetypes.guess_type(submission.file)[0] or "application/octet-stream"
    filename = submission.file.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =============================================================================
# Review
# =============================================================================


@router.put("/{submission_id}/review")
async def review_submission(
    submission_id: str,
    request: ReviewRequest,
    identity: Identity = Depends(require(AuthTier.EDITOR_OR_ADMIN)),
    storage: StorageProvider = Depends(get_storage),
):
    """Record a recommendation and/or decision. The decision also sets status."""
    submission = await _load(storage, submission_id)
    info = submission.reviewer_info

    if request.recommendation is not None:
        info.recommendation = request.recommendation
    if request.decision is not None:
        info.decision = request.decision
        submission.status = request.decision
    info.last_action = utc_now()

    await _save(storage, submission)
    logger.info(f"Submission {submission_id} reviewed by {identity.id}")
    return submission.serialize(reviewer=True)


@router.post("/{submission_id}/comments", status_code=201)
async def add_comment(
    submission_id: str,
    request: CommentRequest,
    identity: Identity = Depends(require(AuthTier.EDITOR_OR_ADMIN)),
    storage: StorageProvider = Depends(get_storage),
):
    if not request.text.strip():
        raise ValidationError("Must be at least 1 characters long", location="text")

    submission = await _load(storage, submission_id)
    info = submission.reviewer_info
    info.comments.append(
        Comment(name=identity.display_name, author_id=identity.id, text=request.text.strip())
    )
    info.last_action = utc_now()

    await _save(storage, submission)
    return submission.serialize(reviewer=True)
