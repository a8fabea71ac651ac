# src/bufconfig/core/errors.py
"""
Exceções canônicas do modelo de configuração do bufconfig.

Este módulo define a hierarquia oficial de exceções utilizadas durante a
leitura, validação, resolução e escrita de arquivos de configuração.

As exceções aqui definidas representam **violações explícitas** de formato,
versão ou forma, e não erros genéricos de execução.

Taxonomia:
    - MalformedConfigError        → falha de decode ou campo desconhecido
    - UnsupportedFileVersionError → versão desconhecida ou não suportada
    - InvalidConfigError          → forma inválida (discriminantes, opções)
    - InvalidPathError            → violação das regras de caminhos
    - InternalConfigError         → estado inalcançável (defeito de lógica)
    - ConfigNotFoundError         → nenhum arquivo encontrado no prefixo

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros de usuário nunca são recuperados internamente
    - Erros internos nunca são apresentados como erro do usuário

Invariantes:
    - Todas as exceções de usuário herdam de `BufConfigError`
    - `InternalConfigError` não herda de nenhuma exceção de usuário

Este módulo existe para garantir clareza,
consistência e previsibilidade no tratamento de erros de configuração.
"""


class BufConfigError(Exception):
    """
    Exceção base para erros de configuração causados pela entrada.

    Esta hierarquia permite:
        - captura genérica de erros de configuração
        - distinção clara entre erro do usuário e defeito interno

    Limites explícitos:
        - Não representa erro de I/O do bucket
        - Não representa defeito de lógica (ver `InternalConfigError`)
    """


class MalformedConfigError(BufConfigError):
    """
    Exceção levantada quando um documento não pode ser decodificado ou
    contém campos desconhecidos para a versão tentada.

    Decisões arquiteturais:
        - O decode é estrito: campos desconhecidos são rejeitados
        - Quando a versão já é conhecida, a mensagem é prefixada com
          `invalid as version <versão>:`
    """


class UnsupportedFileVersionError(BufConfigError):
    """
    Exceção levantada quando a string de versão não é reconhecida, ou é
    reconhecida mas não suportada pelo tipo de arquivo.

    Exemplo:
        - `buf.gen.yaml` com `version: v1beta1`
        - `buf.policy.yaml` com `version: v1`
    """


class InvalidConfigError(BufConfigError):
    """
    Exceção levantada quando a forma da configuração é inválida.

    Exemplos:
        - zero ou mais de um discriminante de um tagged union
        - opção não permitida para a variante selecionada
        - opções mutuamente exclusivas definidas ao mesmo tempo
        - cardinalidade de `root_to_excludes` incompatível com a versão
    """


class InvalidPathError(InvalidConfigError):
    """
    Exceção levantada quando uma regra de validação de caminhos é violada.

    A mensagem sempre nomeia o(s) caminho(s) envolvido(s).
    """


class ConfigNotFoundError(BufConfigError):
    """Nenhum arquivo de configuração encontrado para o prefixo informado."""


class InternalConfigError(Exception):
    """
    Exceção levantada quando um valor escapou de uma validação que deveria
    torná-lo impossível.

    Decisões arquiteturais:
        - Indica defeito de lógica, nunca erro do usuário
        - Aborta a operação corrente em vez de assumir um default

    Invariantes:
        - Não herda de `BufConfigError`
    """
