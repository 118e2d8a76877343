# apps/convites/__init__.py

"""
Convites - entrada de novos membros em boards

Um admin (ou o dono) convida pelo username; o convidado aceita ou
recusa, e quem convidou pode cancelar enquanto estiver pendente.
"""
