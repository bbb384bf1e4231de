"""Date Filing Watchers"""
