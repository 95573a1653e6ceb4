"""
StockSim – Application Layer
==============================
Orquestación del ciclo de vida del mercado (LifecycleController) y
puertos hacia el transporte (ports/).
"""
