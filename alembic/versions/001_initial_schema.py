"""Initial schema: categories and tasks

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None  # This is the first migration
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'category',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        # Trimmed, case-folded name, computed by the application
        sa.Column('name_key', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=32), nullable=False, server_default='#3498db'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'name_key', name='uq_category_user_name_key'),
    )
    op.create_index('ix_category_user_id', 'category', ['user_id'])

    op.create_table(
        'task',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='medium'),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('category.id'), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('external_event_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("status IN ('pending','in-progress','completed')", name='ck_task_status'),
        sa.CheckConstraint("priority IN ('low','medium','high')", name='ck_task_priority'),
    )
    op.create_index('ix_task_user_id', 'task', ['user_id'])
    op.create_index('ix_task_category_id', 'task', ['category_id'])
    op.create_index('idx_task_user_created', 'task', ['user_id', 'created_at'])


def downgrade():
    op.drop_index('idx_task_user_created', table_name='task')
    op.drop_index('ix_task_category_id', table_name='task')
    op.drop_index('ix_task_user_id', table_name='task')
    op.drop_table('task')

    op.drop_index('ix_category_user_id', table_name='category')
    op.drop_table('category')
