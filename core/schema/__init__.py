"""
Core Schema Package.

Transport message schemas and SQL builders for the pathways workflow.

Exports:
    QueueMessage, QueueMessageContent: Topic message schemas
    PreparedQuery and builders: pathway_versions SQL composition
"""

# Queue schemas
from .queue import (
    QueueMessage,
    QueueMessageContent,
    WorkflowResponse,
    UploadMeta,
    decode_envelope,
    build_outcome_message,
    build_upload_message
)

# SQL builders
from .pathways_sql import (
    PreparedQuery,
    build_insert_query,
    build_overlap_query,
    build_select_by_id_query,
    build_table_ddl
)

__all__ = [
    # Queue schemas
    'QueueMessage',
    'QueueMessageContent',
    'WorkflowResponse',
    'UploadMeta',
    'decode_envelope',
    'build_outcome_message',
    'build_upload_message',

    # SQL builders
    'PreparedQuery',
    'build_insert_query',
    'build_overlap_query',
    'build_select_by_id_query',
    'build_table_ddl'
]
