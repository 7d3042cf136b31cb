"""Status code constants for tasks, reviews and audit actions.

Codes are stored as integers and must stay in sync with the mapping
clients use to render them.
"""


class TaskStatus:
    CREATED = 0
    FIXED = 1
    FALSE_POSITIVE = 2
    SKIPPED = 3
    DELETED = 4
    ALREADY_FIXED = 5
    TOO_HARD = 6
    ANSWERED = 7
    VALIDATED = 8
    DISABLED = 9

    NAMES = {
        CREATED: 'Created',
        FIXED: 'Fixed',
        FALSE_POSITIVE: 'Not an Issue',
        SKIPPED: 'Skipped',
        DELETED: 'Deleted',
        ALREADY_FIXED: 'Already Fixed',
        TOO_HARD: "Can't Complete",
        ANSWERED: 'Answered',
        VALIDATED: 'Validated',
        DISABLED: 'Disabled',
    }


class ReviewStatus:
    """Review codes; meta-review uses the same set."""

    REQUESTED = 0
    APPROVED = 1
    REJECTED = 2
    APPROVED_WITH_EDITS = 3
    DISPUTED = 4
    UNNECESSARY = 5
    APPROVED_WITH_REVISIONS = 6
    APPROVED_WITH_FIXES_AFTER_REVISIONS = 7

    NAMES = {
        REQUESTED: 'Requested',
        APPROVED: 'Approved',
        REJECTED: 'Rejected',
        APPROVED_WITH_EDITS: 'Approved With Edits',
        DISPUTED: 'Disputed',
        UNNECESSARY: 'Unnecessary',
        APPROVED_WITH_REVISIONS: 'Approved With Revisions',
        APPROVED_WITH_FIXES_AFTER_REVISIONS: 'Approved With Fixes After Revisions',
    }


class ActionKind:
    TAG_ADDED = 'tag_added'
    TAG_REMOVED = 'tag_removed'
    TASK_STATUS_SET = 'task_status_set'
    TASK_REVIEW_STATUS_SET = 'task_review_status_set'
    META_REVIEW_STATUS_SET = 'meta_review_status_set'


class ItemType:
    TASK = 'task'
    CHALLENGE = 'challenge'


class TagType:
    """Tag namespaces, named after the table the tags apply to."""

    TASKS = 'tasks'
    CHALLENGES = 'challenges'


# Item type -> tag namespace
TAG_TYPE_FOR_ITEM = {
    ItemType.TASK: TagType.TASKS,
    ItemType.CHALLENGE: TagType.CHALLENGES,
}

# Status -> key into the SCORE_POINTS config
SCORE_KEYS = {
    TaskStatus.FIXED: 'FIXED',
    TaskStatus.FALSE_POSITIVE: 'FALSE_POSITIVE',
    TaskStatus.ALREADY_FIXED: 'ALREADY_FIXED',
    TaskStatus.TOO_HARD: 'TOO_HARD',
    TaskStatus.SKIPPED: 'SKIPPED',
}


def is_valid_task_status(status) -> bool:
    return status in TaskStatus.NAMES


def is_valid_review_status(status) -> bool:
    return status in ReviewStatus.NAMES
