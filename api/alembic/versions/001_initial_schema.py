"""Initial schema: users, lexemes and learning progress

Revision ID: initial
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'lexeme',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lemma', sa.String(), nullable=False),
        sa.Column('language', sa.String(length=8), nullable=False),
        sa.Column('pos', sa.String(length=8), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lemma', 'language', 'pos', name='uq_lexeme_lemma_language_pos')
    )
    op.create_index('ix_lexeme_language_lemma', 'lexeme', ['language', 'lemma'])

    op.create_table(
        'learning_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('lexeme_id', sa.Integer(), nullable=False),
        sa.Column('srs_level', sa.Integer(), nullable=False),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=True),
        sa.Column('success_rate', sa.Float(), nullable=False),
        sa.Column('next_review', sa.Date(), nullable=False),
        sa.Column('total_encounters', sa.Integer(), nullable=False),
        sa.Column('correct_uses', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('form_stats', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['lexeme_id'], ['lexeme.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'lexeme_id', name='uq_learning_progress_user_lexeme')
    )
    op.create_index('ix_learning_progress_next_review', 'learning_progress', ['next_review'])
    op.create_index('ix_learning_progress_active', 'learning_progress', ['active'])
    op.create_index('ix_learning_progress_srs_level', 'learning_progress', ['srs_level'])
    op.create_index('ix_learning_progress_user_id', 'learning_progress', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_learning_progress_user_id', table_name='learning_progress')
    op.drop_index('ix_learning_progress_srs_level', table_name='learning_progress')
    op.drop_index('ix_learning_progress_active', table_name='learning_progress')
    op.drop_index('ix_learning_progress_next_review', table_name='learning_progress')
    op.drop_table('learning_progress')
    op.drop_index('ix_lexeme_language_lemma', table_name='lexeme')
    op.drop_table('lexeme')
    op.drop_table('user')
