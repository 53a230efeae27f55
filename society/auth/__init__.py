"""Auth session store and its Supabase adapter."""
