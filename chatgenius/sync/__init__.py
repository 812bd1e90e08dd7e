"""
Client-side message synchronization.

- store: ordered message list with pending / confirmed / failed entries
- writer: optimistic sends reconciled with the durable write
- subscriber: realtime change feed → store reconciliation
- scroll: pinned-to-bottom tracking
- session: one context wired together

Import from the submodules directly; the realtime adapter in
chatgenius.integrations.supabase depends on chatgenius.sync.feed.
"""
