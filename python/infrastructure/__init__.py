"""
Infrastructure package - external dependencies and integrations.

Modules:
- supabase.py - Unified Supabase client
- storage.py - Signature binary storage (Supabase Storage)
- minio_storage.py - MinIO backend for signature binaries
"""

from infrastructure.supabase import SupabaseClient, get_supabase_client
from infrastructure.storage import SignatureStorage, get_signature_storage

__all__ = [
    'SupabaseClient',
    'get_supabase_client',
    'SignatureStorage',
    'get_signature_storage',
]
