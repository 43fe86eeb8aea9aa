from .transformer import map_stock_info_to_symbols, split_into_batches

__all__ = ['map_stock_info_to_symbols', 'split_into_batches']
