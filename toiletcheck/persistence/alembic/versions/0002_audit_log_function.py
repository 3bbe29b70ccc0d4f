"""add create_audit_log database function

Revision ID: 0002_audit_log_function
Revises: 0001_init
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op


revision = "0002_audit_log_function"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # SECURITY DEFINER lets restricted roles append audit rows without table grants.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION create_audit_log(
            p_user_id text,
            p_action text,
            p_resource_type text,
            p_resource_id text DEFAULT NULL,
            p_details jsonb DEFAULT '{}'::jsonb,
            p_success boolean DEFAULT true,
            p_error_message text DEFAULT NULL
        ) RETURNS bigint
        LANGUAGE plpgsql
        SECURITY DEFINER
        AS $$
        DECLARE
            new_id bigint;
        BEGIN
            INSERT INTO audit_logs (
                user_id, action, resource_type, resource_id, details, success, error_message
            )
            VALUES (
                p_user_id,
                p_action,
                p_resource_type,
                p_resource_id,
                COALESCE(p_details, '{}'::jsonb),
                COALESCE(p_success, true),
                p_error_message
            )
            RETURNING id INTO new_id;
            RETURN new_id;
        END;
        $$;
        """
    )


def downgrade() -> None:
    op.execute(
        "DROP FUNCTION IF EXISTS create_audit_log(text, text, text, text, jsonb, boolean, text)"
    )
