# src/bufconfig/core/__init__.py
"""
Core do bufconfig.

Este pacote reúne as folhas compartilhadas por todos os arquivos de
configuração: o registro de versões e nomes de arquivo, a hierarquia de
erros, a normalização de caminhos, o encoding estrito YAML/JSON e a
identidade de módulos.

Princípios fundamentais:
    - Nenhum estado global mutável
    - Tabelas de lookup são somente leitura
    - Erros são tipados e semânticos

Este pacote existe como a base comum sobre a qual os modelos de
configuração são construídos.
"""
