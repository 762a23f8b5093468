"""VIP memberships."""
