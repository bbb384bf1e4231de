"""
Date Filing Domain

Watches an intake folder for new documents and files them by date:
- PDFs → filesystem creation date
- Emails (.eml) → Date / Sent / Delivery-Date / Received header
- Outlook messages (.msg) → sent date from the message container

Each document is renamed "yyyyMMdd <name>" and moved into a yyyyMM folder.
"""

__all__ = ["processors", "resolvers", "watchers"]
