"""
External collaborators: JIRA ticket lookup and email notifications
"""
