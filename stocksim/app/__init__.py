"""
StockSim – App
================
- api/: transporte FastAPI (WebSocket + REST)
- application/: LifecycleController y puertos
- services/: CandleAggregator, SubscriberSyncManager, QuoteBoard
- state/: MarketState
"""
