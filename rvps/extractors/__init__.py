"""Extractors that verify sample and SWID provenances and pull reference values out of them."""