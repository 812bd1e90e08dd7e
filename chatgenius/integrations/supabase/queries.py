"""
Select clauses for joined Supabase reads.

Change feed payloads only carry the bare row, so every message shown to the
user is re-read with MESSAGE_SELECT to pick up author, reactions, file and
thread participants.
"""

USER_COLUMNS = "id, username, full_name, last_seen, status"

MESSAGE_SELECT = f"""
  id,
  content,
  created_at,
  channel_id,
  conversation_id,
  parent_message_id,
  user_id,
  reply_count,
  latest_reply_at,
  is_thread_parent,
  users:users!inner ({USER_COLUMNS}),
  reactions (
    id,
    emoji,
    user_id,
    users:users!inner ({USER_COLUMNS})
  ),
  files (
    id,
    message_id,
    user_id,
    bucket_path,
    file_name,
    file_size,
    content_type,
    is_image,
    image_width,
    image_height,
    created_at
  ),
  thread_participants!thread_participants_thread_id_fkey (
    id,
    user_id,
    last_read_at,
    created_at,
    users:users!inner ({USER_COLUMNS})
  )
"""

CHANNEL_SELECT = "id, name, description, created_at"

CONVERSATION_SELECT = """
  *,
  user1:user1_id (id, username, full_name, status, is_bot, bot_owner_id),
  user2:user2_id (id, username, full_name, status, is_bot, bot_owner_id)
"""
