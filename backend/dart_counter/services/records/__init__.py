"""Historical statistics over persisted match records.

Nothing here touches the live match; functions take plain record dicts as
produced by ``MatchRecord.to_dict``.
"""
