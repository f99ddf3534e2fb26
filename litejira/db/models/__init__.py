from litejira.db.models.comment import Comment
from litejira.db.models.project import Project, ProjectMember
from litejira.db.models.report import Report
from litejira.db.models.task import Task
from litejira.db.models.user import User

__all__ = [
    "Comment",
    "Project",
    "ProjectMember",
    "Report",
    "Task",
    "User",
]
