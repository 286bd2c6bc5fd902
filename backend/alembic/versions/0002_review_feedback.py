# alembic/versions/0002_review_feedback.py
# helpfulness votes and abuse reports on reviews
from alembic import op
import sqlalchemy as sa

revision = '0002_review_feedback'
down_revision = '0001_initial'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('review_votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('review_id', sa.Integer(), sa.ForeignKey('reviews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('is_helpful', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('review_id', 'user_email', name='uq_review_vote_user'),
    )
    op.create_index('ix_review_votes_review_id', 'review_votes', ['review_id'])

    op.create_table('review_reports',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('review_id', sa.Integer(), sa.ForeignKey('reviews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reporter_email', sa.String(length=255), nullable=False),
        sa.Column('reason', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('review_id', 'reporter_email', name='uq_review_report_reporter'),
    )
    op.create_index('ix_review_reports_review_id', 'review_reports', ['review_id'])


def downgrade():
    op.drop_table('review_reports')
    op.drop_table('review_votes')
