from taskflow import db
from taskflow.errors import ValidationFailed
from taskflow.models import Comment
from taskflow.utils.activity import CommentAdded, log_activity
from taskflow.utils.transactions import atomic


def list_comments(task):
    return task.comments.order_by(Comment.created_at.asc(), Comment.id.asc()).all()


def add_comment(task, user, content):
    content = (content or '').strip()
    if not content:
        raise ValidationFailed('Comment content is required')

    with atomic(f'comment on task {task.id}'):
        comment = Comment(content=content, task_id=task.id, user_id=user.id)
        db.session.add(comment)
        db.session.flush()
        log_activity(CommentAdded(task_title=task.title, comment_id=comment.id),
                     task.project_id, user.id, task_id=task.id)
    return comment
