"""create_checklist_engine_tables

Revision ID: a0c1e2f3b4d5
Revises:
Create Date: 2026-10-18 09:00:00.000000

숙소/방/작업 배치와 체크리스트 실행 테이블 생성.
사용자 역할(admin/property_owner/housekeeper), 숙소 지오펜스 좌표,
방별 사진 요구 조건, 체크리스트 버전(낙관적 잠금) 컬럼 포함.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = 'a0c1e2f3b4d5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users — 사용자 (역할 문자열 1개)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('role', sa.String(30), nullable=False, server_default='housekeeper'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # properties — 숙소 (지오펜스 기준 좌표 선택)
    op.create_table(
        'properties',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('owner_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    # rooms — 방 정의
    op.create_table(
        'rooms',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # property_rooms — 숙소-방 피벗 (방문 순서, 사진 요구 조건)
    op.create_table(
        'property_rooms',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('property_id', UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('room_id', UUID(as_uuid=True), sa.ForeignKey('rooms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true')),
        sa.Column('requires_photo', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('photos_required_count', sa.Integer(), nullable=True),
        sa.UniqueConstraint('property_id', 'room_id', name='uq_property_room'),
        sa.CheckConstraint(
            'photos_required_count IS NULL OR photos_required_count BETWEEN 1 AND 10',
            name='ck_property_room_photos_required_count',
        ),
    )

    # tasks — 청소 작업
    op.create_table(
        'tasks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('estimated_time', sa.Integer(), server_default='0'),
        sa.Column('requires_photo', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # room_tasks — 숙소 내 방별 작업 배정
    op.create_table(
        'room_tasks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('property_id', UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('room_id', UUID(as_uuid=True), sa.ForeignKey('rooms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('task_id', UUID(as_uuid=True), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order', sa.Integer(), server_default='0'),
        sa.UniqueConstraint('property_id', 'room_id', 'task_id', name='uq_room_task'),
    )

    # checklists — 체크리스트 (상태 전이 + 버전)
    op.create_table(
        'checklists',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('property_id', UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('housekeeper_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('scheduled_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'reviewed')",
            name='ck_checklist_status',
        ),
        sa.CheckConstraint('rating IS NULL OR rating BETWEEN 1 AND 5', name='ck_checklist_rating'),
    )
    op.create_index('ix_checklists_housekeeper_date', 'checklists', ['housekeeper_id', 'scheduled_date'])
    op.create_index('ix_checklists_property_id', 'checklists', ['property_id'])

    # checklist_items — 체크리스트 항목 (방 × 작업)
    op.create_table(
        'checklist_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('checklist_id', UUID(as_uuid=True), sa.ForeignKey('checklists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('task_id', UUID(as_uuid=True), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('room_id', UUID(as_uuid=True), sa.ForeignKey('rooms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), server_default='0'),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('photos', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_checklist_items_checklist_id', 'checklist_items', ['checklist_id'])


def downgrade() -> None:
    op.drop_index('ix_checklist_items_checklist_id', table_name='checklist_items')
    op.drop_table('checklist_items')
    op.drop_index('ix_checklists_property_id', table_name='checklists')
    op.drop_index('ix_checklists_housekeeper_date', table_name='checklists')
    op.drop_table('checklists')
    op.drop_table('room_tasks')
    op.drop_table('tasks')
    op.drop_table('property_rooms')
    op.drop_table('rooms')
    op.drop_index('ix_properties_owner_id', table_name='properties')
    op.drop_table('properties')
    op.drop_table('users')
